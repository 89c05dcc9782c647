"""Simulated report delivery -- acknowledges after a fixed delay."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from invoice_roi.config.settings import Settings

from .base import ReportDispatcher, ReportRequest

logger = logging.getLogger(__name__)


class SimulatedReportDispatcher(ReportDispatcher):
    """Stands in for PDF generation and email delivery. Produces no document."""

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or Settings()

    async def health_check(self) -> bool:
        return True

    async def dispatch(self, request: ReportRequest) -> bool:
        logger.info(
            f"Simulating report for '{request.inputs.scenario_name}' to {request.email}"
        )
        await asyncio.sleep(self._settings.report_delay_seconds)
        return True
