"""Market package exports."""

from candle_sim.market.price_process import NumpyRandomSource, PriceProcess, RandomSource

__all__ = [
    "NumpyRandomSource",
    "PriceProcess",
    "RandomSource",
]
