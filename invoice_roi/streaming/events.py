"""SSE notification types and serialization for calculator sessions."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class NotificationType(str, Enum):
    """Everything a session is told about while it works."""

    # Calculation
    CALCULATION_STARTED = "calculation_started"
    CALCULATION_COMPLETED = "calculation_completed"
    CALCULATION_REJECTED = "calculation_rejected"
    CALCULATION_FAILED = "calculation_failed"

    # Scenarios
    SCENARIO_SAVED = "scenario_saved"
    SCENARIO_LOADED = "scenario_loaded"
    SCENARIO_DELETED = "scenario_deleted"

    # Reports
    REPORT_REQUESTED = "report_requested"
    REPORT_SENT = "report_sent"
    REPORT_FAILED = "report_failed"


@dataclass
class SSEEvent:
    """A single Server-Sent Event ready for wire serialization."""

    event_type: NotificationType
    data: dict[str, Any]
    sequence_id: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def to_sse_string(self) -> str:
        """Serialize to SSE wire format.

        Format:
            event: <type>
            data: <json>
            id: <seq>

            (terminated by double newline)
        """
        payload = {
            **self.data,
            "timestamp": self.timestamp.isoformat(),
        }
        data_json = json.dumps(payload, default=str)
        return f"event: {self.event_type.value}\ndata: {data_json}\nid: {self.sequence_id}\n\n"
