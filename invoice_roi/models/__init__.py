from .inputs import CalculatorInputs, parse_number
from .results import CalculatorResults, CostBreakdown

__all__ = ["CalculatorInputs", "CalculatorResults", "CostBreakdown", "parse_number"]
