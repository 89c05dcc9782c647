"""FastAPI application for the invoice automation ROI calculator."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from invoice_roi.config.settings import Settings, get_settings
from invoice_roi.display.results import render_results
from invoice_roi.engine.calculator import EngineConstants, ROIEngine
from invoice_roi.hooks.audit_hooks import log_engine_call
from invoice_roi.hooks.progress_hooks import get_progress_message
from invoice_roi.reports import ReportDispatcher, ReportRequest, SimulatedReportDispatcher
from invoice_roi.scenarios import ScenarioNotFoundError, ScenarioStore, StaleScenarioError
from invoice_roi.schemas import (
    CalculateResponse,
    CalculatorForm,
    CreateSessionResponse,
    NotificationModel,
    ReportRequestBody,
    ReportResponse,
    ResultsModel,
    SaveScenarioRequest,
    ScenarioModel,
)
from invoice_roi.streaming import NotificationType, StreamManager
from invoice_roi.validation import CalculatorError, validate_email, validate_inputs

logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Invoice ROI API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Singleton stream manager
stream_manager = StreamManager()

# In-memory session store, lives as long as the process
_sessions: dict[str, dict[str, Any]] = {}


def get_engine(settings: Settings = Depends(get_settings)) -> ROIEngine:
    return ROIEngine(EngineConstants.from_settings(settings))


def get_report_dispatcher(settings: Settings = Depends(get_settings)) -> ReportDispatcher:
    return SimulatedReportDispatcher(settings=settings)


def _get_session(session_id: str) -> dict[str, Any]:
    session = _sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _parse_last_event_id(raw: Optional[str]) -> Optional[int]:
    """Sequence id from a reconnecting client's Last-Event-ID header.

    A malformed value is logged and treated as a fresh connection.
    """
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring malformed Last-Event-ID header: {raw!r}")
        return None


async def _notify(
    session_id: Optional[str], event_type: NotificationType, data: dict[str, Any]
) -> None:
    """Emit a notification with its user-facing message, if there is a session."""
    if session_id is None:
        return
    payload = {**data, "message": get_progress_message(event_type, data)}
    await stream_manager.notify(session_id, event_type, payload)


@app.post("/api/calculate", response_model=CalculateResponse)
async def calculate(
    body: CalculatorForm,
    session_id: Optional[str] = None,
    settings: Settings = Depends(get_settings),
    engine: ROIEngine = Depends(get_engine),
):
    """Validate the form, then run the engine and render the results panel."""
    session = _get_session(session_id) if session_id is not None else None
    inputs = body.to_inputs()

    try:
        validate_inputs(inputs)
    except CalculatorError as e:
        logger.warning(f"Rejected calculation for '{inputs.scenario_name}': {e}")
        await _notify(session_id, NotificationType.CALCULATION_REJECTED, {"reason": str(e)})
        raise HTTPException(status_code=422, detail=str(e))

    await _notify(session_id, NotificationType.CALCULATION_STARTED, {
        "scenario_name": inputs.scenario_name,
    })

    # Loading-state latency only; the result does not depend on it
    await asyncio.sleep(settings.calculation_delay_seconds)
    try:
        results = engine.compute(inputs)
        display = render_results(results, inputs)
    except Exception:
        logger.exception(f"Calculation failed for '{inputs.scenario_name}'")
        await _notify(session_id, NotificationType.CALCULATION_FAILED, {
            "scenario_name": inputs.scenario_name,
        })
        raise HTTPException(
            status_code=500,
            detail=get_progress_message(NotificationType.CALCULATION_FAILED),
        )

    entry = log_engine_call("calculate", session_id, inputs.to_dict(), results)
    if session is not None:
        session["last_inputs"] = inputs
        session["last_results"] = results
        session["audit"].append(entry)

    await _notify(session_id, NotificationType.CALCULATION_COMPLETED, {
        "scenario_name": inputs.scenario_name,
        "monthly_savings": results.monthly_savings,
    })

    return CalculateResponse(
        inputs=inputs.to_dict(),
        results=ResultsModel.from_results(results),
        display=display.to_dict(),
    )


@app.get("/api/constants")
async def get_constants(engine: ROIEngine = Depends(get_engine)):
    """Engine constants currently in force."""
    return engine.constants.to_dict()


@app.post("/api/sessions", response_model=CreateSessionResponse)
async def create_session(engine: ROIEngine = Depends(get_engine)):
    session_id = str(uuid4())
    _sessions[session_id] = {
        "session_id": session_id,
        "created_at": datetime.now(tz=timezone.utc),
        "scenarios": ScenarioStore(engine=engine),
        "last_inputs": None,
        "last_results": None,
        "audit": [],
    }
    stream_manager.open(session_id)
    logger.info(f"Created session {session_id}")
    return CreateSessionResponse(session_id=session_id)


@app.delete("/api/sessions/{session_id}", status_code=204)
async def end_session(session_id: str):
    _get_session(session_id)
    del _sessions[session_id]
    stream_manager.discard(session_id)
    logger.info(f"Ended session {session_id}")


@app.get("/api/sessions/{session_id}/scenarios", response_model=list[ScenarioModel])
async def list_scenarios(session_id: str):
    store: ScenarioStore = _get_session(session_id)["scenarios"]
    return [s.to_dict() for s in store.list()]


@app.post("/api/sessions/{session_id}/scenarios", response_model=ScenarioModel)
async def save_scenario(session_id: str, body: SaveScenarioRequest):
    store: ScenarioStore = _get_session(session_id)["scenarios"]
    inputs = body.inputs.to_inputs()
    try:
        validate_inputs(inputs)
        scenario = store.save(
            inputs, body.results.to_results() if body.results is not None else None
        )
    except StaleScenarioError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CalculatorError as e:
        raise HTTPException(status_code=422, detail=str(e))

    await _notify(session_id, NotificationType.SCENARIO_SAVED, {
        "scenario_id": scenario.id,
        "scenario_name": scenario.scenario_name,
    })
    return scenario.to_dict()


@app.get("/api/sessions/{session_id}/scenarios/{scenario_id}", response_model=ScenarioModel)
async def load_scenario(session_id: str, scenario_id: str):
    session = _get_session(session_id)
    try:
        scenario = session["scenarios"].get(scenario_id)
    except ScenarioNotFoundError:
        raise HTTPException(status_code=404, detail="Scenario not found")

    session["last_inputs"] = scenario.inputs
    session["last_results"] = scenario.results
    await _notify(session_id, NotificationType.SCENARIO_LOADED, {
        "scenario_id": scenario.id,
        "scenario_name": scenario.scenario_name,
    })
    return scenario.to_dict()


@app.delete("/api/sessions/{session_id}/scenarios/{scenario_id}", status_code=204)
async def delete_scenario(session_id: str, scenario_id: str):
    store: ScenarioStore = _get_session(session_id)["scenarios"]
    try:
        scenario = store.delete(scenario_id)
    except ScenarioNotFoundError:
        raise HTTPException(status_code=404, detail="Scenario not found")

    await _notify(session_id, NotificationType.SCENARIO_DELETED, {
        "scenario_id": scenario.id,
        "scenario_name": scenario.scenario_name,
    })


@app.post("/api/sessions/{session_id}/reports", response_model=ReportResponse)
async def request_report(
    session_id: str,
    body: ReportRequestBody,
    engine: ROIEngine = Depends(get_engine),
    dispatcher: ReportDispatcher = Depends(get_report_dispatcher),
):
    """Validate the email and hand the report to the dispatcher."""
    session = _get_session(session_id)
    try:
        email = validate_email(body.email)
    except CalculatorError as e:
        raise HTTPException(status_code=422, detail=str(e))

    inputs = body.inputs.to_inputs()
    request = ReportRequest(inputs=inputs, results=engine.compute(inputs), email=email)
    await _notify(session_id, NotificationType.REPORT_REQUESTED, {"email": email})

    try:
        delivered = await dispatcher.dispatch(request)
    except Exception:
        logger.exception(f"Report dispatch failed for session {session_id}")
        delivered = False

    session["audit"].append(log_engine_call("report", session_id, {"email": email}, delivered))

    if not delivered:
        await _notify(session_id, NotificationType.REPORT_FAILED, {"email": email})
        raise HTTPException(
            status_code=502,
            detail=get_progress_message(NotificationType.REPORT_FAILED),
        )

    await _notify(session_id, NotificationType.REPORT_SENT, {"email": email})
    return ReportResponse(
        status="sent",
        email=email,
        message=get_progress_message(NotificationType.REPORT_SENT, {"email": email}),
    )


@app.get(
    "/api/sessions/{session_id}/notifications", response_model=list[NotificationModel]
)
async def list_notifications(session_id: str, after: Optional[int] = None):
    """Polling fallback for clients without SSE: buffered notifications, oldest first."""
    _get_session(session_id)
    events = stream_manager.history(session_id, after=after)
    return [NotificationModel.from_event(e) for e in events]


@app.get("/api/sessions/{session_id}/stream")
async def stream_session(session_id: str, request: Request):
    """SSE endpoint -- streams session notifications."""
    _get_session(session_id)
    last_event_id = _parse_last_event_id(request.headers.get("last-event-id"))

    generator = stream_manager.event_generator(session_id, last_event_id=last_event_id)
    return StreamingResponse(generator, media_type="text/event-stream")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}
