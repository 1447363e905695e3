"""candle-sim - single-instrument practice trading venue."""

__version__ = "0.1.0"
