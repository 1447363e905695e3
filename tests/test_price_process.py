from __future__ import annotations

import pytest

from candle_sim.config import Settings
from candle_sim.market.price_process import NumpyRandomSource, PriceProcess


class _ScriptedRandom:
    """Deterministic RandomSource returning queued returns and a fixed volume."""

    def __init__(self, returns: list[float], volume: int = 250) -> None:
        self._returns = list(returns)
        self._volume = volume
        self.normal_calls: list[tuple[float, float]] = []
        self.integer_calls: list[tuple[int, int]] = []

    def normal(self, mean: float, std: float) -> float:
        self.normal_calls.append((mean, std))
        return self._returns.pop(0)

    def integers(self, low: int, high: int) -> int:
        self.integer_calls.append((low, high))
        return self._volume


def _fixed_clock() -> str:
    return "2024-01-01T00:00:00+00:00"


def test_first_candle_opens_at_initial_price() -> None:
    rng = _ScriptedRandom([0.01])
    process = PriceProcess(initial_price=100.0, random_source=rng, clock=_fixed_clock)
    candle = process.next(None)
    assert candle.open == 100.0
    assert candle.close == 101.0
    assert candle.high == 101.0
    assert candle.low == 100.0
    assert candle.volume == 250
    assert candle.timestamp == "2024-01-01T00:00:00+00:00"


def test_next_candle_opens_at_previous_close() -> None:
    rng = _ScriptedRandom([-0.02])
    process = PriceProcess(random_source=rng, clock=_fixed_clock)
    candle = process.next(50.0)
    assert candle.open == 50.0
    assert candle.close == 49.0
    assert candle.high == 50.0
    assert candle.low == 49.0


def test_return_is_drawn_with_configured_sigma_and_volume_range() -> None:
    rng = _ScriptedRandom([0.0])
    process = PriceProcess(price_sigma=0.004, volume_min=10, volume_max=20, random_source=rng)
    process.next(None)
    assert rng.normal_calls == [(0.0, 0.004)]
    assert rng.integer_calls == [(10, 20)]


def test_return_is_clamped_to_max_jump() -> None:
    rng = _ScriptedRandom([0.5, -0.5])
    process = PriceProcess(max_jump_pct=0.03, random_source=rng)
    up = process.next(100.0)
    down = process.next(100.0)
    assert up.close == 103.0
    assert down.close == 97.0


def test_close_is_floored_at_one_cent() -> None:
    rng = _ScriptedRandom([-5.0, -0.03])
    process = PriceProcess(max_jump_pct=1.0, random_source=rng)
    wiped = process.next(2.0)
    assert wiped.close == 0.01
    at_floor = process.next(0.01)
    assert at_floor.close == 0.01
    assert at_floor.low == 0.01


def test_prices_are_rounded_to_cents() -> None:
    rng = _ScriptedRandom([0.001234])
    process = PriceProcess(random_source=rng)
    candle = process.next(123.45)
    assert candle.close == round(123.45 * 1.001234, 2)
    for value in (candle.open, candle.high, candle.low, candle.close):
        assert round(value, 2) == value


def test_generate_chains_closes() -> None:
    rng = _ScriptedRandom([0.01, 0.01, -0.01])
    process = PriceProcess(random_source=rng)
    candles = list(process.generate(3))
    assert len(candles) == 3
    assert candles[1].open == candles[0].close
    assert candles[2].open == candles[1].close


def test_invalid_volume_range_rejected() -> None:
    with pytest.raises(ValueError):
        PriceProcess(volume_min=10, volume_max=10)


def test_seeded_process_is_reproducible() -> None:
    settings = Settings(random_seed=42)
    first = [c.close for c in PriceProcess.from_settings(settings, clock=_fixed_clock).generate(20)]
    second = [c.close for c in PriceProcess.from_settings(settings, clock=_fixed_clock).generate(20)]
    assert first == second


def test_random_walk_properties_hold() -> None:
    max_jump = 0.03
    process = PriceProcess(
        initial_price=100.0,
        price_sigma=0.02,
        max_jump_pct=max_jump,
        random_source=NumpyRandomSource(seed=7),
    )
    for candle in process.generate(500):
        assert candle.low <= candle.open <= candle.high
        assert candle.low <= candle.close <= candle.high
        assert candle.high == max(candle.open, candle.close)
        assert candle.low == min(candle.open, candle.close)
        assert candle.close >= 0.01
        assert 100 <= candle.volume < 500
        # Cent rounding of close can add at most half a cent to the move.
        tolerance = 0.005 / candle.open + 1e-9
        assert abs(candle.close / candle.open - 1) <= max_jump + tolerance
