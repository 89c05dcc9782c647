from .base import ReportDispatcher, ReportRequest
from .simulated import SimulatedReportDispatcher

__all__ = ["ReportDispatcher", "ReportRequest", "SimulatedReportDispatcher"]
