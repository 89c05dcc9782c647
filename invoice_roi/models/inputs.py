"""Caller-supplied calculator inputs and the form parsing boundary."""

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Mapping

# Longest numeric prefix accepted by a browser's parseFloat()
_NUMERIC_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(value: Any) -> float:
    """Parse a user-entered value the way a form field does.

    Leading whitespace is skipped and the longest numeric prefix is used,
    so ``"12abc"`` parses to 12. Empty, unparsable and non-finite values
    (NaN, infinities, exponents that overflow) become 0.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    else:
        match = _NUMERIC_PREFIX.match(str(value).lstrip())
        if match is None:
            return 0.0
        number = float(match.group(0))
    if not math.isfinite(number):
        return 0.0
    return number or 0.0


@dataclass(frozen=True)
class CalculatorInputs:
    """One snapshot of the form: the operational metrics of an AP team."""

    scenario_name: str = "My Scenario"
    monthly_invoice_volume: float = 1000
    num_ap_staff: float = 3
    avg_hours_per_invoice: float = 0.5
    hourly_wage: float = 25
    error_rate_manual: float = 5  # percent, 0-100
    error_cost: float = 50
    time_horizon_months: float = 12
    one_time_implementation_cost: float = 10000

    @classmethod
    def numeric_fields(cls) -> list[str]:
        return [f.name for f in fields(cls) if f.name != "scenario_name"]

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> CalculatorInputs:
        """Build inputs from raw form values; missing keys keep their defaults."""
        values: dict[str, Any] = {}
        if "scenario_name" in form:
            values["scenario_name"] = str(form["scenario_name"])
        for name in cls.numeric_fields():
            if name in form:
                values[name] = parse_number(form[name])
        return cls(**values)

    def with_changes(self, **changes: Any) -> CalculatorInputs:
        """Return a new snapshot with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
