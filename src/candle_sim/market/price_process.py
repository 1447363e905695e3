"""Random-walk candle generator with bounded jumps."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from typing import Protocol

import numpy as np

from candle_sim.config import Settings
from candle_sim.types import Candle
from candle_sim.utils.money import round_to_cents

PRICE_FLOOR = 0.01


class RandomSource(Protocol):
    """Randomness consumed by the price process."""

    def normal(self, mean: float, std: float) -> float: ...

    def integers(self, low: int, high: int) -> int: ...


class NumpyRandomSource:
    """``RandomSource`` backed by ``numpy.random.Generator``."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = np.random.default_rng(seed)

    def normal(self, mean: float, std: float) -> float:
        return float(self._rng.normal(mean, std))

    def integers(self, low: int, high: int) -> int:
        return int(self._rng.integers(low, high))


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class PriceProcess:
    """Produces the next candle from the previous close.

    The per-tick return is drawn from ``Normal(0, price_sigma)`` and clamped
    to ``[-max_jump_pct, +max_jump_pct]``; close is floored at one cent.
    """

    def __init__(
        self,
        *,
        initial_price: float = 100.0,
        price_sigma: float = 0.0025,
        max_jump_pct: float = 0.03,
        volume_min: int = 100,
        volume_max: int = 500,
        random_source: RandomSource | None = None,
        clock: Callable[[], str] | None = None,
    ) -> None:
        if volume_max <= volume_min:
            raise ValueError("volume_max must be greater than volume_min")
        self._initial_price = initial_price
        self._price_sigma = price_sigma
        self._max_jump_pct = max_jump_pct
        self._volume_min = volume_min
        self._volume_max = volume_max
        self._random = random_source or NumpyRandomSource()
        self._clock = clock or _utc_now_iso

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        random_source: RandomSource | None = None,
        clock: Callable[[], str] | None = None,
    ) -> PriceProcess:
        return cls(
            initial_price=settings.initial_price,
            price_sigma=settings.price_sigma,
            max_jump_pct=settings.max_jump_pct,
            volume_min=settings.volume_min,
            volume_max=settings.volume_max,
            random_source=random_source or NumpyRandomSource(settings.random_seed),
            clock=clock,
        )

    def next(self, previous_close: float | None) -> Candle:
        """Generate one candle opening at ``previous_close``."""
        open_ = self._initial_price if previous_close is None else previous_close
        r = self._random.normal(0.0, self._price_sigma)
        r = max(-self._max_jump_pct, min(self._max_jump_pct, r))
        close = max(PRICE_FLOOR, open_ * (1.0 + r))
        volume = self._random.integers(self._volume_min, self._volume_max)
        return Candle(
            timestamp=self._clock(),
            open=round_to_cents(open_),
            high=round_to_cents(max(open_, close)),
            low=round_to_cents(min(open_, close)),
            close=round_to_cents(close),
            volume=volume,
        )

    def generate(self, count: int, previous_close: float | None = None) -> Iterator[Candle]:
        """Yield ``count`` chained candles."""
        close = previous_close
        for _ in range(count):
            candle = self.next(close)
            close = candle.close
            yield candle
