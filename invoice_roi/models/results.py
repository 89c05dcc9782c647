"""Immutable calculation results."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class CostBreakdown:
    """Monthly cost terms behind the savings figure."""

    labor_cost_manual: float
    auto_cost: float
    error_savings: float


@dataclass(frozen=True)
class CalculatorResults:
    """Financial outputs of one engine run. Unrounded."""

    monthly_savings: float
    cumulative_savings: float
    net_savings: float
    payback_months: float
    roi_percentage: float
    breakdown: CostBreakdown

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CalculatorResults:
        return cls(
            monthly_savings=data["monthly_savings"],
            cumulative_savings=data["cumulative_savings"],
            net_savings=data["net_savings"],
            payback_months=data["payback_months"],
            roi_percentage=data["roi_percentage"],
            breakdown=CostBreakdown(**data["breakdown"]),
        )
