from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from invoice_roi.models.inputs import CalculatorInputs
from invoice_roi.models.results import CalculatorResults


@dataclass(frozen=True)
class ReportRequest:
    """Everything a report is built from, plus where to send it."""

    inputs: CalculatorInputs
    results: CalculatorResults
    email: str


class ReportDispatcher(ABC):
    """Abstract base for report delivery backends."""

    @abstractmethod
    async def dispatch(self, request: ReportRequest) -> bool:
        """Hand the report off for delivery. True means acknowledged."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Verify the delivery backend is reachable."""
        ...
