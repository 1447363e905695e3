"""Execution package exports."""

from candle_sim.exec.ledger import Ledger, LedgerInvariantError

__all__ = [
    "Ledger",
    "LedgerInvariantError",
]
