"""Display formatting for currency, percentages and chart ticks.

Rounding is half-away-from-zero on the exact binary value of the float,
which is what browser number formatting does.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext


def _round(value: float, places: int) -> Decimal:
    exact = Decimal(value)
    # quantize needs room for every integer digit plus the kept places
    with localcontext() as ctx:
        ctx.prec = max(28, exact.adjusted() + places + 2)
        return exact.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def _non_finite(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return "-∞" if value < 0 else "∞"


def format_currency(value: float) -> str:
    """Whole US dollars with thousands separators: ``-$1,235``."""
    if not math.isfinite(value):
        text = _non_finite(value)
        return f"-${text[1:]}" if text.startswith("-") else f"${text}"
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(_round(value, 0)):,.0f}"


def format_percent(value: float) -> str:
    if not math.isfinite(value):
        return f"{_non_finite(value)}%"
    return f"{_round(value, 1):.1f}%"


def format_months(value: float) -> str:
    if not math.isfinite(value):
        return f"{_non_finite(value)} mo"
    return f"{_round(value, 1):.1f} mo"


def format_axis_thousands(value: float) -> str:
    """Chart axis tick in thousands: ``$44K``."""
    if not math.isfinite(value):
        return f"${_non_finite(value)}K"
    return f"${_round(value / 1000, 0):.0f}K"
