"""ROI engine.

Maps one CalculatorInputs snapshot to a fresh CalculatorResults. The engine
is deterministic and side-effect free: it performs no validation, rounding
or clamping, and guards its two divisions by returning 0.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

from invoice_roi.config.settings import Settings
from invoice_roi.engine.formulas import automation_cost, error_savings, labor_cost_manual
from invoice_roi.models.inputs import CalculatorInputs
from invoice_roi.models.results import CalculatorResults, CostBreakdown


@dataclass(frozen=True)
class EngineConstants:
    """Pricing and bias constants owned by the deployment, not the caller."""

    automated_cost_per_invoice: float = 0.20
    error_rate_auto: float = 0.001  # fraction, 0.1%
    roi_boost_factor: float = 1.10  # flat multiplier on monthly savings

    @classmethod
    def from_settings(cls, settings: Settings) -> EngineConstants:
        return cls(
            automated_cost_per_invoice=settings.automated_cost_per_invoice,
            error_rate_auto=settings.error_rate_auto,
            roi_boost_factor=settings.roi_boost_factor,
        )

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


DEFAULT_CONSTANTS = EngineConstants()


class ROIEngine:
    """Stateless engine that runs the invoice automation ROI calculation."""

    def __init__(self, constants: Optional[EngineConstants] = None) -> None:
        self.constants = constants or DEFAULT_CONSTANTS

    def compute(self, inputs: CalculatorInputs) -> CalculatorResults:
        c = self.constants

        labor = labor_cost_manual(
            inputs.num_ap_staff,
            inputs.hourly_wage,
            inputs.avg_hours_per_invoice,
            inputs.monthly_invoice_volume,
        )
        auto = automation_cost(inputs.monthly_invoice_volume, c.automated_cost_per_invoice)
        errors = error_savings(
            inputs.error_rate_manual,
            c.error_rate_auto,
            inputs.monthly_invoice_volume,
            inputs.error_cost,
        )

        monthly_savings = (labor + errors - auto) * c.roi_boost_factor
        cumulative_savings = monthly_savings * inputs.time_horizon_months
        net_savings = cumulative_savings - inputs.one_time_implementation_cost

        # Guards differ on purpose: payback needs positive savings,
        # ROI only needs a positive implementation cost.
        payback_months = (
            inputs.one_time_implementation_cost / monthly_savings
            if monthly_savings > 0
            else 0.0
        )
        roi_percentage = (
            (net_savings / inputs.one_time_implementation_cost) * 100
            if inputs.one_time_implementation_cost > 0
            else 0.0
        )

        return CalculatorResults(
            monthly_savings=monthly_savings,
            cumulative_savings=cumulative_savings,
            net_savings=net_savings,
            payback_months=payback_months,
            roi_percentage=roi_percentage,
            breakdown=CostBreakdown(
                labor_cost_manual=labor,
                auto_cost=auto,
                error_savings=errors,
            ),
        )


def compute(
    inputs: CalculatorInputs, constants: Optional[EngineConstants] = None
) -> CalculatorResults:
    """Run the engine once with the given (or default) constants."""
    return ROIEngine(constants).compute(inputs)
