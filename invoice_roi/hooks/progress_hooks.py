"""Maps notification types to the user-facing messages shown for them."""

from __future__ import annotations

from typing import Any

from invoice_roi.streaming.events import NotificationType

# Notification type -> message template, formatted with the event data
_MESSAGES: dict[NotificationType, str] = {
    NotificationType.CALCULATION_STARTED: "Calculating...",
    NotificationType.CALCULATION_COMPLETED: "Calculation complete!",
    NotificationType.CALCULATION_REJECTED: "{reason}",
    NotificationType.CALCULATION_FAILED: "Failed to calculate. Please try again.",
    NotificationType.SCENARIO_SAVED: 'Scenario "{scenario_name}" saved!',
    NotificationType.SCENARIO_LOADED: 'Loaded "{scenario_name}"',
    NotificationType.SCENARIO_DELETED: 'Deleted "{scenario_name}"',
    NotificationType.REPORT_REQUESTED: "Generating Report...",
    NotificationType.REPORT_SENT: "Report sent to {email}!",
    NotificationType.REPORT_FAILED: "Failed to generate report. Please try again.",
}

_DEFAULT_MESSAGE = "Processing..."


def get_progress_message(event_type: Any, data: dict[str, Any] | None = None) -> str:
    """Return the message for a notification.

    Unknown types, or data missing a placeholder, get "Processing...".
    """
    template = _MESSAGES.get(event_type)
    if template is None:
        return _DEFAULT_MESSAGE
    try:
        return template.format(**(data or {}))
    except KeyError:
        return _DEFAULT_MESSAGE
