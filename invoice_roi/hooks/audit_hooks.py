"""Audit hooks -- logs engine runs and report dispatches."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


def log_engine_call(
    operation: str,
    session_id: str | None = None,
    arguments: dict[str, Any] | None = None,
    result: Any = None,
) -> dict[str, Any]:
    """Record an engine or dispatcher invocation in the audit log.

    Returns the audit entry dict for downstream persistence.
    """
    entry = {
        "session_id": session_id,
        "operation": operation,
        "arguments": arguments or {},
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        "result_summary": str(result)[:500] if result is not None else None,
    }
    logger.info("Audit: %s → %s", operation, session_id or "anonymous")
    return entry
