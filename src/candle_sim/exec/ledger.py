"""Single-position cash ledger: buy, short, exit, funding and reset."""

from __future__ import annotations

import math
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from candle_sim.config import Settings
from candle_sim.types import (
    Direction,
    LedgerError,
    OrderResult,
    Position,
    TransactionKind,
    TransactionRecord,
)
from candle_sim.utils.logging import get_logger, log_order_execution, log_order_rejected
from candle_sim.utils.money import parse_amount, round_to_cents, truncate_quantity


class LedgerInvariantError(RuntimeError):
    """Raised when ledger state breaks its own invariants."""


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class Ledger:
    """Cash balance, one position, realized P&L and a newest-first log.

    Prices are always supplied by the caller; ``None`` means no price yet.
    Validation failures come back as ``OrderResult.failure`` and leave the
    state untouched.
    """

    def __init__(
        self,
        *,
        initial_balance: float = 10_000.0,
        quantity_decimals: int = 4,
        clock: Callable[[], str] | None = None,
    ) -> None:
        self._initial_balance = round_to_cents(initial_balance)
        self._quantity_decimals = quantity_decimals
        self._clock = clock or _utc_now_iso
        self._logger = get_logger("candle_sim.exec.ledger")
        self._cash_balance = self._initial_balance
        self._position = Position.flat()
        self._realized_pnl = 0.0
        self._transactions: list[TransactionRecord] = []

    @classmethod
    def from_settings(cls, settings: Settings, *, clock: Callable[[], str] | None = None) -> Ledger:
        return cls(
            initial_balance=settings.initial_balance,
            quantity_decimals=settings.quantity_decimals,
            clock=clock,
        )

    @property
    def cash_balance(self) -> float:
        return self._cash_balance

    @property
    def position(self) -> Position:
        return self._position

    @property
    def realized_pnl(self) -> float:
        return self._realized_pnl

    @property
    def transactions(self) -> tuple[TransactionRecord, ...]:
        """All records, newest first."""
        return tuple(self._transactions)

    def recent_transactions(self, limit: int = 20) -> tuple[TransactionRecord, ...]:
        if limit <= 0:
            return ()
        return tuple(self._transactions[:limit])

    # ---- order entry ----

    def buy(self, amount: object, price: float | None) -> OrderResult:
        """Open a long position worth ``amount`` at ``price``."""
        checked = self._check_entry(amount, price)
        if isinstance(checked, LedgerError):
            return self._reject("buy", checked, amount=amount, price=price)
        quantity, price = checked

        cost = round_to_cents(quantity * price)
        if cost > self._cash_balance:
            return self._reject("buy", LedgerError.INSUFFICIENT_FUNDS, cost=cost, cash=self._cash_balance)

        record = self._record(TransactionKind.BUY, price=price, quantity=quantity, amount=cost)
        self._cash_balance = round_to_cents(self._cash_balance - cost)
        self._position = Position.long(quantity, price)
        return self._commit(record)

    def short(self, amount: object, price: float | None) -> OrderResult:
        """Open a short position worth ``amount`` at ``price``.

        Proceeds are credited immediately and act as the only collateral.
        """
        checked = self._check_entry(amount, price)
        if isinstance(checked, LedgerError):
            return self._reject("short", checked, amount=amount, price=price)
        quantity, price = checked

        proceeds = round_to_cents(quantity * price)
        if not math.isfinite(self._cash_balance + proceeds):
            return self._reject("short", LedgerError.INVALID_AMOUNT, amount=amount, price=price)
        record = self._record(TransactionKind.SHORT, price=price, quantity=quantity, amount=proceeds)
        self._cash_balance = round_to_cents(self._cash_balance + proceeds)
        self._position = Position.short(quantity, price)
        return self._commit(record)

    # ---- exit ----

    def exit(self, price: float | None) -> OrderResult:
        """Close the open position at ``price``; all-or-nothing."""
        position = self._position
        if not position.is_open:
            return self._reject("exit", LedgerError.NO_OPEN_POSITION)
        if price is None:
            return self._reject("exit", LedgerError.NO_PRICE_AVAILABLE)
        if position.quantity <= 0:
            raise LedgerInvariantError(f"open {position.direction.value} position with quantity {position.quantity}")

        quantity = position.quantity
        notional = round_to_cents(quantity * price)
        if position.direction is Direction.LONG:
            kind = TransactionKind.EXIT_LONG
            pnl = round_to_cents((price - position.average_price) * quantity)
            new_cash = round_to_cents(self._cash_balance + notional)
        else:
            if notional > self._cash_balance:
                return self._reject(
                    "exit",
                    LedgerError.INSUFFICIENT_FUNDS_TO_COVER,
                    cost=notional,
                    cash=self._cash_balance,
                )
            kind = TransactionKind.EXIT_SHORT
            pnl = round_to_cents((position.average_price - price) * quantity)
            new_cash = round_to_cents(self._cash_balance - notional)

        record = self._record(kind, price=price, quantity=quantity, amount=notional, realized_pnl=pnl)
        self._cash_balance = new_cash
        self._realized_pnl = round_to_cents(self._realized_pnl + pnl)
        self._position = Position.flat()
        return self._commit(record, realized_total=self._realized_pnl)

    # ---- funding / reset ----

    def add_funds(self, amount: object) -> OrderResult:
        """Credit cash; does not touch the position."""
        value = parse_amount(amount)
        if value is None:
            return self._reject("add_funds", LedgerError.INVALID_AMOUNT, amount=amount)
        if not math.isfinite(self._cash_balance + value):
            return self._reject("add_funds", LedgerError.INVALID_AMOUNT, amount=amount)
        credited = round_to_cents(value)
        record = self._record(TransactionKind.FUND, price=None, quantity=None, amount=credited)
        self._cash_balance = round_to_cents(self._cash_balance + credited)
        return self._commit(record)

    def reset(self) -> None:
        """Restore the starting balance, flat position and empty log."""
        self._cash_balance = self._initial_balance
        self._position = Position.flat()
        self._realized_pnl = 0.0
        self._transactions = []
        self._logger.info("ledger_reset", cash_balance=self._cash_balance)

    # ---- valuation ----

    def unrealized_pnl(self, price: float | None) -> float:
        """Mark-to-market P&L; positive means in profit for either side."""
        position = self._position
        if not position.is_open or price is None:
            return 0.0
        if position.direction is Direction.LONG:
            return round_to_cents((price - position.average_price) * position.quantity)
        return round_to_cents((position.average_price - price) * position.quantity)

    def equity(self, price: float | None) -> float:
        """Cash plus the signed market value of the position."""
        position = self._position
        if not position.is_open or price is None:
            return self._cash_balance
        return round_to_cents(self._cash_balance + position.signed_quantity * price)

    # ---- helpers ----

    def _check_entry(self, amount: object, price: float | None) -> tuple[float, float] | LedgerError:
        if self._position.is_open:
            return LedgerError.POSITION_ALREADY_OPEN
        if price is None:
            return LedgerError.NO_PRICE_AVAILABLE
        value = parse_amount(amount)
        if value is None:
            return LedgerError.INVALID_AMOUNT
        quantity = truncate_quantity(value, price, self._quantity_decimals)
        # Amounts near float max overflow once divided by a sub-unit price.
        if not math.isfinite(quantity) or not math.isfinite(quantity * price):
            return LedgerError.INVALID_AMOUNT
        if quantity <= 0:
            return LedgerError.AMOUNT_TOO_SMALL
        return quantity, price

    def _record(
        self,
        kind: TransactionKind,
        *,
        price: float | None,
        quantity: float | None,
        amount: float,
        realized_pnl: float | None = None,
    ) -> TransactionRecord:
        prefix = "fund" if kind is TransactionKind.FUND else "tx"
        return TransactionRecord(
            id=_new_id(prefix),
            kind=kind,
            price=price,
            quantity=quantity,
            amount=amount,
            timestamp=self._clock(),
            realized_pnl=realized_pnl,
        )

    def _commit(self, record: TransactionRecord, **extra: object) -> OrderResult:
        self._transactions.insert(0, record)
        log_order_execution(
            self._logger,
            kind=record.kind.value,
            quantity=record.quantity,
            price=record.price,
            amount=record.amount,
            record_id=record.id,
            realized_pnl=record.realized_pnl,
            cash_balance=self._cash_balance,
            **extra,
        )
        return OrderResult.success(record)

    def _reject(self, action: str, error: LedgerError, **context: object) -> OrderResult:
        log_order_rejected(self._logger, action=action, error=error.value, **context)
        return OrderResult.failure(error)
