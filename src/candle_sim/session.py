"""Market session: bounded candle history plus the ledger it prices."""

from __future__ import annotations

from collections import deque
from dataclasses import asdict

import pandas as pd  # type: ignore[import-untyped]

from candle_sim.config import Settings
from candle_sim.exec.ledger import Ledger
from candle_sim.market.price_process import PriceProcess
from candle_sim.schemas import CandleView, PositionView, SessionSnapshot, TransactionView
from candle_sim.types import Candle, OrderResult
from candle_sim.utils.logging import get_logger, log_candle

_FRAME_COLUMNS = ["timestamp", "open", "high", "low", "close", "volume"]


class MarketSession:
    """The unit an external scheduler ticks and an external UI queries.

    Not thread-safe: callers serialize ticks and user actions.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        price_process: PriceProcess | None = None,
        ledger: Ledger | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._price_process = price_process or PriceProcess.from_settings(self._settings)
        self._ledger = ledger or Ledger.from_settings(self._settings)
        self._history: deque[Candle] = deque(maxlen=self._settings.max_candles)
        self._previous_price = self._settings.initial_price
        self._logger = get_logger("candle_sim.session")

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def previous_price(self) -> float:
        return self._previous_price

    # ---- market ----

    def candles(self) -> tuple[Candle, ...]:
        """History ordered oldest to newest."""
        return tuple(self._history)

    def tick(self) -> Candle:
        """Generate the next candle and append it, evicting the oldest."""
        candle = self._price_process.next(self.latest_price())
        self._append(candle)
        return candle

    def warmup(self, count: int | None = None) -> int:
        """Pre-fill the history; returns the number of candles generated."""
        total = self._settings.warmup_candles if count is None else max(0, count)
        for candle in self._price_process.generate(total, self.latest_price()):
            self._append(candle)
        self._logger.info("session_warmed_up", candles=total, latest_price=self.latest_price())
        return total

    def _append(self, candle: Candle) -> None:
        latest = self.latest_price()
        if latest is not None:
            self._previous_price = latest
        self._history.append(candle)
        log_candle(
            self._logger,
            open_=candle.open,
            close=candle.close,
            volume=candle.volume,
            history_len=len(self._history),
        )

    def latest_price(self) -> float | None:
        if not self._history:
            return None
        return self._history[-1].close

    def price_change_pct(self) -> float | None:
        """Percent change of the latest close against the previous price."""
        latest = self.latest_price()
        if latest is None or self._previous_price <= 0:
            return None
        return round((latest - self._previous_price) / self._previous_price * 100, 2)

    def candles_frame(self) -> pd.DataFrame:
        """History as an OHLCV DataFrame with UTC timestamps."""
        frame = pd.DataFrame([asdict(c) for c in self._history], columns=_FRAME_COLUMNS)
        frame["timestamp"] = pd.to_datetime(frame["timestamp"], utc=True)
        return frame

    # ---- trading ----

    def buy(self, amount: object) -> OrderResult:
        return self._ledger.buy(amount, self.latest_price())

    def short(self, amount: object) -> OrderResult:
        return self._ledger.short(amount, self.latest_price())

    def exit(self) -> OrderResult:
        return self._ledger.exit(self.latest_price())

    def add_funds(self, amount: object) -> OrderResult:
        return self._ledger.add_funds(amount)

    def reset(self) -> None:
        """Reset the ledger only; candle history is kept."""
        self._ledger.reset()

    def unrealized_pnl(self) -> float:
        return self._ledger.unrealized_pnl(self.latest_price())

    def equity(self) -> float:
        return self._ledger.equity(self.latest_price())

    def snapshot(self, transaction_limit: int = 20) -> SessionSnapshot:
        """Read-only view of the full session state."""
        ledger = self._ledger
        return SessionSnapshot(
            latest_price=self.latest_price(),
            price_change_pct=self.price_change_pct(),
            cash_balance=ledger.cash_balance,
            position=PositionView.from_position(ledger.position),
            realized_pnl=ledger.realized_pnl,
            unrealized_pnl=self.unrealized_pnl(),
            equity=self.equity(),
            candles=[CandleView.from_candle(c) for c in self._history],
            transactions=[TransactionView.from_record(r) for r in ledger.recent_transactions(transaction_limit)],
        )
