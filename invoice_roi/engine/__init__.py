from .calculator import DEFAULT_CONSTANTS, EngineConstants, ROIEngine, compute
from .timeseries import SavingsPoint, SavingsSeries, savings_series

__all__ = [
    "DEFAULT_CONSTANTS",
    "EngineConstants",
    "ROIEngine",
    "compute",
    "SavingsPoint",
    "SavingsSeries",
    "savings_series",
]
