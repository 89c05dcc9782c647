"""Request and response models for the HTTP API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from invoice_roi.models.inputs import CalculatorInputs, parse_number
from invoice_roi.models.results import CalculatorResults
from invoice_roi.streaming.events import SSEEvent


class CalculatorForm(BaseModel):
    """Raw form values. Numbers may arrive as user-entered text."""

    scenario_name: Optional[str] = None
    monthly_invoice_volume: Optional[float] = None
    num_ap_staff: Optional[float] = None
    avg_hours_per_invoice: Optional[float] = None
    hourly_wage: Optional[float] = None
    error_rate_manual: Optional[float] = None
    error_cost: Optional[float] = None
    time_horizon_months: Optional[float] = None
    one_time_implementation_cost: Optional[float] = None

    @field_validator(*CalculatorInputs.numeric_fields(), mode="before")
    @classmethod
    def _parse_form_number(cls, value: Any) -> Any:
        # null keeps the default, anything else goes through form parsing
        return value if value is None else parse_number(value)

    def to_inputs(self) -> CalculatorInputs:
        return CalculatorInputs.from_form(self.model_dump(exclude_none=True))


# Overflowed results stay readable as "Infinity"/"NaN" instead of null
_LOSSLESS_FLOATS = ConfigDict(ser_json_inf_nan="strings")


class InputsModel(BaseModel):
    model_config = _LOSSLESS_FLOATS

    scenario_name: str
    monthly_invoice_volume: float
    num_ap_staff: float
    avg_hours_per_invoice: float
    hourly_wage: float
    error_rate_manual: float
    error_cost: float
    time_horizon_months: float
    one_time_implementation_cost: float


class BreakdownModel(BaseModel):
    model_config = _LOSSLESS_FLOATS

    labor_cost_manual: float
    auto_cost: float
    error_savings: float


class ResultsModel(BaseModel):
    model_config = _LOSSLESS_FLOATS

    monthly_savings: float
    cumulative_savings: float
    net_savings: float
    payback_months: float
    roi_percentage: float
    breakdown: BreakdownModel

    @classmethod
    def from_results(cls, results: CalculatorResults) -> ResultsModel:
        return cls.model_validate(results.to_dict())

    def to_results(self) -> CalculatorResults:
        return CalculatorResults.from_dict(self.model_dump())


class CalculateResponse(BaseModel):
    model_config = _LOSSLESS_FLOATS

    inputs: InputsModel
    results: ResultsModel
    display: dict[str, Any]


class CreateSessionResponse(BaseModel):
    session_id: str


class SaveScenarioRequest(BaseModel):
    inputs: CalculatorForm
    results: Optional[ResultsModel] = None


class ScenarioModel(BaseModel):
    model_config = _LOSSLESS_FLOATS

    id: str
    scenario_name: str
    inputs: InputsModel
    results: ResultsModel
    created_at: datetime


class ReportRequestBody(BaseModel):
    inputs: CalculatorForm
    email: str = ""


class ReportResponse(BaseModel):
    status: str
    email: str
    message: str


class NotificationModel(BaseModel):
    """A buffered session notification, for clients that poll instead of streaming."""

    model_config = _LOSSLESS_FLOATS

    event_type: str
    sequence_id: int
    message: str
    data: dict[str, Any]
    timestamp: datetime

    @classmethod
    def from_event(cls, event: SSEEvent) -> NotificationModel:
        return cls(
            event_type=event.event_type.value,
            sequence_id=event.sequence_id,
            message=event.data.get("message", ""),
            data=event.data,
            timestamp=event.timestamp,
        )
