"""Read-only session snapshot schemas for UI consumers."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from candle_sim.types import Candle, Position, TransactionRecord


class CandleView(BaseModel):
    """One candle as exposed to the UI."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    timestamp: str
    open: float = Field(gt=0)
    high: float = Field(gt=0)
    low: float = Field(gt=0)
    close: float = Field(gt=0)
    volume: int = Field(gt=0)

    @classmethod
    def from_candle(cls, candle: Candle) -> CandleView:
        return cls(
            timestamp=candle.timestamp,
            open=candle.open,
            high=candle.high,
            low=candle.low,
            close=candle.close,
            volume=candle.volume,
        )


class PositionView(BaseModel):
    """Current position; quantity is unsigned."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    direction: Literal["LONG", "SHORT", "NONE"]
    quantity: float = Field(ge=0)
    average_price: float = Field(ge=0)

    @classmethod
    def from_position(cls, position: Position) -> PositionView:
        return cls(
            direction=position.direction.value,
            quantity=position.quantity,
            average_price=position.average_price,
        )


class TransactionView(BaseModel):
    """One ledger entry."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    kind: Literal["FUND", "BUY", "SHORT", "EXIT_LONG", "EXIT_SHORT"]
    price: float | None = None
    quantity: float | None = None
    amount: float
    realized_pnl: float | None = None
    timestamp: str

    @classmethod
    def from_record(cls, record: TransactionRecord) -> TransactionView:
        return cls(
            id=record.id,
            kind=record.kind.value,
            price=record.price,
            quantity=record.quantity,
            amount=record.amount,
            realized_pnl=record.realized_pnl,
            timestamp=record.timestamp,
        )


class SessionSnapshot(BaseModel):
    """Everything a renderer needs after one state transition."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    latest_price: float | None = None
    price_change_pct: float | None = None
    cash_balance: float
    position: PositionView
    realized_pnl: float
    unrealized_pnl: float
    equity: float
    candles: list[CandleView] = Field(default_factory=list)
    transactions: list[TransactionView] = Field(default_factory=list)
