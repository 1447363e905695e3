"""Cent rounding and quantity truncation.

Arithmetic goes through ``Decimal(str(x))`` so that binary float noise
(``0.1 + 0.2``) never shifts a value across a rounding boundary.
"""

from __future__ import annotations

import math
from decimal import ROUND_FLOOR, ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal, localcontext

_CENT = Decimal("0.01")
# Wide enough to quantize any finite float without InvalidOperation.
_PRECISION = 400


def round_to_cents(value: float) -> float:
    """Round to two decimal places, halves toward +inf (-1.005 -> -1.00)."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        d = Decimal(str(value))
        rounding = ROUND_HALF_UP if d >= 0 else ROUND_HALF_DOWN
        return float(d.quantize(_CENT, rounding=rounding))


def truncate_quantity(amount: float, price: float, decimals: int) -> float:
    """Floor ``amount / price`` to ``decimals`` fractional digits."""
    if price <= 0:
        return 0.0
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        step = Decimal(1).scaleb(-decimals)
        raw = Decimal(str(amount)) / Decimal(str(price))
        steps = (raw / step).to_integral_value(rounding=ROUND_FLOOR)
        return float(steps * step)


def parse_amount(value: object) -> float | None:
    """Coerce raw user input to a finite positive float, or ``None``."""
    if isinstance(value, bool):
        return None
    try:
        amount = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount) or amount <= 0:
        return None
    return amount
