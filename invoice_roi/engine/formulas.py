"""Monthly cost terms of the invoice automation model.

Each function is a pure calculation with no side effects and no input
checks. All monetary values share the currency of the inputs.
"""


def labor_cost_manual(
    num_ap_staff: float,
    hourly_wage: float,
    avg_hours_per_invoice: float,
    monthly_invoice_volume: float,
) -> float:
    """Labor = staff x wage x hours_per_invoice x volume"""
    return num_ap_staff * hourly_wage * avg_hours_per_invoice * monthly_invoice_volume


def automation_cost(
    monthly_invoice_volume: float,
    automated_cost_per_invoice: float,
) -> float:
    """Auto_Cost = volume x cost_per_automated_invoice"""
    return monthly_invoice_volume * automated_cost_per_invoice


def error_savings(
    error_rate_manual: float,
    error_rate_auto: float,
    monthly_invoice_volume: float,
    error_cost: float,
) -> float:
    """Error_Savings = (manual_rate_% / 100 - auto_rate) x volume x cost_per_error

    Negative when the manual error rate is below the automated one.
    """
    return ((error_rate_manual / 100) - error_rate_auto) * monthly_invoice_volume * error_cost
