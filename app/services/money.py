"""Money / rounding helpers.

Conversions run in Decimal and round exactly once, at the end, half-up to
cents. Floats enter through str() so 0.045 stays 0.045 rather than its binary
approximation.
"""

from __future__ import annotations
import math
from decimal import Decimal, ROUND_HALF_UP, localcontext

_CENT = Decimal("0.01")
# Two 17-digit operands multiply exactly within this precision
MONEY_PRECISION = 60


def to_decimal(value: float | Decimal) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def round2(value: float | Decimal) -> float:
    dec = to_decimal(value)
    with localcontext() as ctx:
        # quantize needs every integer digit plus the two decimals
        ctx.prec = max(MONEY_PRECISION, dec.adjusted() + 3)
        return float(dec.quantize(_CENT, rounding=ROUND_HALF_UP))


def is_valid_amount(value: float) -> bool:
    """Finite and non-negative."""
    return isinstance(value, (int, float)) and math.isfinite(value) and value >= 0
