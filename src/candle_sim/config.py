"""Configuration loading from environment variables and the .env file."""

from enum import Enum
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(str, Enum):
    """Log output format."""

    JSON = "json"
    CONSOLE = "console"


class Settings(BaseSettings):
    """Simulator settings.

    Every field can be overridden with a ``CANDLE_SIM_`` prefixed environment
    variable or an entry in ``.env``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CANDLE_SIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==================== Scheduler ====================
    candle_interval_ms: int = Field(default=1000, ge=10, description="Tick period in milliseconds")
    max_candles: int = Field(default=60, ge=1, description="Candle history capacity")
    warmup_candles: int = Field(default=40, ge=0, description="Candles generated at session start")

    # ==================== Price process ====================
    initial_price: float = Field(default=100.0, gt=0, description="Open of the very first candle")
    price_sigma: float = Field(default=0.0025, gt=0, description="Std-dev of the per-tick return")
    max_jump_pct: float = Field(default=0.03, gt=0, le=1.0, description="Per-tick return cap")
    volume_min: int = Field(default=100, ge=1, description="Lower bound of candle volume (inclusive)")
    volume_max: int = Field(default=500, ge=2, description="Upper bound of candle volume (exclusive)")
    random_seed: int | None = Field(default=None, description="Seed for reproducible runs")

    # ==================== Ledger ====================
    quantity_decimals: int = Field(
        default=4,
        ge=0,
        le=12,
        description="Fractional digits kept when truncating order quantities",
    )
    initial_balance: float = Field(default=10_000.0, ge=0, description="Starting cash balance")

    # ==================== Logging ====================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: LogFormat = Field(
        default=LogFormat.CONSOLE,
        description="Log output format",
    )

    @model_validator(mode="after")
    def check_volume_range(self) -> "Settings":
        """Reject an empty volume range."""
        if self.volume_max <= self.volume_min:
            raise ValueError("volume_max must be greater than volume_min")
        return self

    @property
    def candle_interval_sec(self) -> float:
        """Tick period in seconds."""
        return self.candle_interval_ms / 1000.0


# Lazily built instance for the CLI
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the shared settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Rebuild the shared settings instance."""
    global _settings
    _settings = Settings()
    return _settings
