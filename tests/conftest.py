"""Shared test fixtures for the invoice ROI test suite."""

import pytest

from invoice_roi.config.settings import Settings
from invoice_roi.engine.calculator import ROIEngine
from invoice_roi.models.inputs import CalculatorInputs


@pytest.fixture
def engine() -> ROIEngine:
    return ROIEngine()


@pytest.fixture
def reference_inputs() -> CalculatorInputs:
    """The worked example: 1,000 invoices/month handled by 3 AP clerks."""
    return CalculatorInputs(
        scenario_name="Reference",
        monthly_invoice_volume=1000,
        num_ap_staff=3,
        hourly_wage=25,
        avg_hours_per_invoice=0.5,
        error_rate_manual=5,
        error_cost=50,
        time_horizon_months=12,
        one_time_implementation_cost=10000,
    )


@pytest.fixture
def no_error_inputs(reference_inputs) -> CalculatorInputs:
    """Manual process with no errors: the error term turns negative."""
    return reference_inputs.with_changes(scenario_name="No errors", error_rate_manual=0)


@pytest.fixture
def fast_settings() -> Settings:
    """Settings with the simulated delays switched off."""
    return Settings(calculation_delay_seconds=0.0, report_delay_seconds=0.0)
