import pytest
from pydantic import ValidationError

from candle_sim.config import LogFormat, Settings


def test_defaults_match_simulator_constants() -> None:
    settings = Settings()
    assert settings.candle_interval_ms == 1000
    assert settings.candle_interval_sec == 1.0
    assert settings.max_candles == 60
    assert settings.warmup_candles == 40
    assert settings.initial_price == 100.0
    assert settings.price_sigma == 0.0025
    assert settings.max_jump_pct == 0.03
    assert settings.quantity_decimals == 4
    assert settings.initial_balance == 10_000.0
    assert settings.log_format is LogFormat.CONSOLE


def test_env_prefix_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CANDLE_SIM_MAX_CANDLES", "5")
    monkeypatch.setenv("CANDLE_SIM_LOG_FORMAT", "json")
    settings = Settings()
    assert settings.max_candles == 5
    assert settings.log_format is LogFormat.JSON


def test_empty_volume_range_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(volume_min=50, volume_max=50)


def test_out_of_range_values_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(max_candles=0)
    with pytest.raises(ValidationError):
        Settings(max_jump_pct=1.5)
    with pytest.raises(ValidationError):
        Settings(initial_price=0)
