"""Shared domain types for the simulator core."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Direction(str, Enum):
    """Directional exposure of the single position."""

    LONG = "LONG"
    SHORT = "SHORT"
    NONE = "NONE"


class TransactionKind(str, Enum):
    """Kind of ledger entry."""

    FUND = "FUND"
    BUY = "BUY"
    SHORT = "SHORT"
    EXIT_LONG = "EXIT_LONG"
    EXIT_SHORT = "EXIT_SHORT"


class LedgerError(str, Enum):
    """Recoverable validation outcomes of ledger operations."""

    INVALID_AMOUNT = "INVALID_AMOUNT"
    AMOUNT_TOO_SMALL = "AMOUNT_TOO_SMALL"
    POSITION_ALREADY_OPEN = "POSITION_ALREADY_OPEN"
    NO_OPEN_POSITION = "NO_OPEN_POSITION"
    NO_PRICE_AVAILABLE = "NO_PRICE_AVAILABLE"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    INSUFFICIENT_FUNDS_TO_COVER = "INSUFFICIENT_FUNDS_TO_COVER"


@dataclass(frozen=True, slots=True)
class Candle:
    """One sampled interval. No wicks: high/low are max/min of open/close."""

    timestamp: str
    open: float
    high: float
    low: float
    close: float
    volume: int


@dataclass(frozen=True, slots=True)
class Position:
    """Single open position; quantity is always unsigned."""

    direction: Direction
    quantity: float
    average_price: float

    @classmethod
    def flat(cls) -> Position:
        return cls(direction=Direction.NONE, quantity=0.0, average_price=0.0)

    @classmethod
    def long(cls, quantity: float, average_price: float) -> Position:
        return cls(direction=Direction.LONG, quantity=quantity, average_price=average_price)

    @classmethod
    def short(cls, quantity: float, average_price: float) -> Position:
        return cls(direction=Direction.SHORT, quantity=quantity, average_price=average_price)

    @property
    def is_open(self) -> bool:
        return self.direction is not Direction.NONE

    @property
    def signed_quantity(self) -> float:
        """Quantity with shorts negative, for display."""
        if self.direction is Direction.SHORT:
            return -self.quantity
        return self.quantity


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """Immutable ledger entry."""

    id: str
    kind: TransactionKind
    price: float | None
    quantity: float | None
    amount: float
    timestamp: str
    realized_pnl: float | None = None


@dataclass(frozen=True, slots=True)
class OrderResult:
    """Outcome of a ledger operation: either a record or an error kind."""

    ok: bool
    record: TransactionRecord | None = None
    error: LedgerError | None = None

    @classmethod
    def success(cls, record: TransactionRecord) -> OrderResult:
        return cls(ok=True, record=record)

    @classmethod
    def failure(cls, error: LedgerError) -> OrderResult:
        return cls(ok=False, error=error)
