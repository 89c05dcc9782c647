"""Results panel: formatted headline figures, breakdown lines and chart data."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from invoice_roi.display.formatting import (
    format_axis_thousands,
    format_currency,
    format_months,
    format_percent,
)
from invoice_roi.engine.timeseries import SavingsPoint, savings_series
from invoice_roi.models.inputs import CalculatorInputs
from invoice_roi.models.results import CalculatorResults


@dataclass(frozen=True)
class BreakdownLine:
    label: str
    amount: str


@dataclass(frozen=True)
class ChartPoint:
    month: int
    monthly: float
    cumulative: float
    monthly_label: str
    cumulative_label: str
    axis_label: str


@dataclass(frozen=True)
class ResultsDisplay:
    """Everything the results panel shows for one calculation."""

    scenario_name: str
    monthly_savings: str
    cumulative_savings: str
    net_savings: str
    payback_period: str
    roi_percentage: str
    time_horizon_months: float
    breakdown: list[BreakdownLine] = field(default_factory=list)
    chart: list[ChartPoint] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _chart_point(point: SavingsPoint) -> ChartPoint:
    return ChartPoint(
        month=point.month,
        monthly=point.monthly_value,
        cumulative=point.cumulative_value,
        monthly_label=format_currency(point.monthly_value),
        cumulative_label=format_currency(point.cumulative_value),
        axis_label=format_axis_thousands(point.cumulative_value),
    )


def render_results(results: CalculatorResults, inputs: CalculatorInputs) -> ResultsDisplay:
    breakdown = results.breakdown
    lines = [
        BreakdownLine("Manual Labor Cost", format_currency(breakdown.labor_cost_manual)),
        BreakdownLine("Error Savings", f"+{format_currency(breakdown.error_savings)}"),
        BreakdownLine("Automation Cost", f"-{format_currency(breakdown.auto_cost)}"),
        BreakdownLine("Monthly Net Savings", format_currency(results.monthly_savings)),
    ]
    return ResultsDisplay(
        scenario_name=inputs.scenario_name,
        monthly_savings=format_currency(results.monthly_savings),
        cumulative_savings=format_currency(results.cumulative_savings),
        net_savings=format_currency(results.net_savings),
        payback_period=format_months(results.payback_months),
        roi_percentage=format_percent(results.roi_percentage),
        time_horizon_months=inputs.time_horizon_months,
        breakdown=lines,
        chart=[_chart_point(p) for p in savings_series(results, inputs)],
    )
