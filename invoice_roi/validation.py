"""Caller-side checks that gate the engine and the report dispatcher."""

from __future__ import annotations

from invoice_roi.models.inputs import CalculatorInputs


class CalculatorError(ValueError):
    """Base class for user-facing rejections."""


class InputValidationError(CalculatorError):
    """The form inputs cannot be calculated."""


class ReportRequestError(CalculatorError):
    """The report request is malformed."""


def validate_inputs(inputs: CalculatorInputs) -> None:
    """Reject inputs the engine must never see. Volume is checked first."""
    if inputs.monthly_invoice_volume <= 0:
        raise InputValidationError("Monthly invoice volume must be greater than 0")
    if inputs.num_ap_staff <= 0:
        raise InputValidationError("Number of AP staff must be greater than 0")


def validate_email(email: str | None) -> str:
    if not email or "@" not in email:
        raise ReportRequestError("Please enter a valid email address")
    return email
