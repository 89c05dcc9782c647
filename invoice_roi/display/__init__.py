from .formatting import format_axis_thousands, format_currency, format_months, format_percent
from .results import BreakdownLine, ChartPoint, ResultsDisplay, render_results

__all__ = [
    "format_axis_thousands",
    "format_currency",
    "format_months",
    "format_percent",
    "BreakdownLine",
    "ChartPoint",
    "ResultsDisplay",
    "render_results",
]
