"""Savings time series for the results chart."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator

from invoice_roi.models.inputs import CalculatorInputs
from invoice_roi.models.results import CalculatorResults


@dataclass(frozen=True)
class SavingsPoint:
    month: int
    monthly_value: float
    cumulative_value: float  # net of the implementation cost


class SavingsSeries:
    """Restartable sequence of points for months 0..time_horizon_months.

    Month 0 carries no monthly savings and the full implementation cost as
    a negative cumulative value.
    """

    def __init__(
        self,
        monthly_savings: float,
        time_horizon_months: float,
        implementation_cost: float,
    ) -> None:
        self.monthly_savings = monthly_savings
        self.time_horizon_months = time_horizon_months
        self.implementation_cost = implementation_cost

    def __len__(self) -> int:
        if self.time_horizon_months < 0:
            return 0
        return math.floor(self.time_horizon_months) + 1

    def __iter__(self) -> Iterator[SavingsPoint]:
        for month in range(len(self)):
            yield SavingsPoint(
                month=month,
                monthly_value=0.0 if month == 0 else self.monthly_savings,
                cumulative_value=self.monthly_savings * month - self.implementation_cost,
            )


def savings_series(results: CalculatorResults, inputs: CalculatorInputs) -> SavingsSeries:
    return SavingsSeries(
        monthly_savings=results.monthly_savings,
        time_horizon_months=inputs.time_horizon_months,
        implementation_cost=inputs.one_time_implementation_cost,
    )
