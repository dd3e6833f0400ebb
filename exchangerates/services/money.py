"""Rate rounding helpers.

Centralized so every converted rate the API returns uses identical rounding
semantics.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP

RATE_SIGNIFICANT_DIGITS = 10


def round_rate(value: float, digits: int = RATE_SIGNIFICANT_DIGITS) -> float:
    """Round half-up to ``digits`` significant digits (not decimal places).

    Rebasing on a currency quoted in millions per euro yields rates far below
    1e-6, so a fixed number of places would flatten them to zero.
    """
    d = Decimal(str(value))
    if not d.is_finite() or d.is_zero():
        return value
    quantum = Decimal(1).scaleb(d.adjusted() - digits + 1)
    return float(d.quantize(quantum, rounding=ROUND_HALF_UP))
