"""Tests for FastAPI endpoints -- calculate, sessions, scenarios, reports, SSE."""

import asyncio
import logging
import threading
import time
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
import uvicorn
from httpx import ASGITransport, AsyncClient

from invoice_roi.config.settings import Settings, get_settings
from invoice_roi.engine.calculator import ROIEngine
from invoice_roi.main import (
    _parse_last_event_id,
    _sessions,
    app,
    get_engine,
    get_report_dispatcher,
    stream_manager,
)
from invoice_roi.reports import ReportDispatcher
from invoice_roi.streaming.events import NotificationType

REFERENCE_FORM = {
    "scenario_name": "Reference",
    "monthly_invoice_volume": "1000",
    "num_ap_staff": "3",
    "avg_hours_per_invoice": "0.5",
    "hourly_wage": "25",
    "error_rate_manual": "5",
    "error_cost": "50",
    "time_horizon_months": "12",
    "one_time_implementation_cost": "10000",
}


def _fast_settings() -> Settings:
    return Settings(calculation_delay_seconds=0.0, report_delay_seconds=0.0)


@pytest.fixture(autouse=True)
def fast_app():
    app.dependency_overrides[get_settings] = _fast_settings
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def _new_session(client: AsyncClient) -> str:
    resp = await client.post("/api/sessions")
    assert resp.status_code == 200
    return resp.json()["session_id"]


class _TestServer:
    """Runs the FastAPI app on a real server in a background thread."""

    def __init__(self, host: str = "127.0.0.1", port: int = 9877):
        self.host = host
        self.port = port
        self.base_url = f"http://{host}:{port}"
        self._server = None

    def start(self):
        config = uvicorn.Config(app, host=self.host, port=self.port, log_level="error")
        self._server = uvicorn.Server(config)
        thread = threading.Thread(target=self._server.run, daemon=True)
        thread.start()
        # Wait for server to be ready
        for _ in range(50):
            try:
                httpx.get(f"{self.base_url}/health", timeout=0.5)
                return
            except httpx.ConnectError:
                time.sleep(0.1)

    def stop(self):
        if self._server:
            self._server.should_exit = True


@pytest.fixture(scope="module")
def server():
    srv = _TestServer()
    srv.start()
    yield srv
    srv.stop()


class _BrokenEngine(ROIEngine):
    def compute(self, inputs):
        raise ArithmeticError("overflow in breakdown")


class TestCalculate:
    @pytest.mark.asyncio
    async def test_reference_calculation(self, client):
        resp = await client.post("/api/calculate", json=REFERENCE_FORM)
        assert resp.status_code == 200
        body = resp.json()
        assert body["results"]["monthly_savings"] == pytest.approx(43_725)
        assert body["results"]["roi_percentage"] == pytest.approx(5147.0)
        assert body["results"]["breakdown"]["auto_cost"] == pytest.approx(200)
        assert body["inputs"]["monthly_invoice_volume"] == 1000
        assert body["display"]["monthly_savings"] == "$43,725"
        assert body["display"]["roi_percentage"] == "5147.0%"
        assert len(body["display"]["chart"]) == 13

    @pytest.mark.asyncio
    async def test_accepts_numbers_and_defaults(self, client):
        resp = await client.post("/api/calculate", json={"num_ap_staff": 3})
        assert resp.status_code == 200
        assert resp.json()["inputs"]["scenario_name"] == "My Scenario"

    @pytest.mark.asyncio
    async def test_unparsable_volume_rejected(self, client):
        resp = await client.post(
            "/api/calculate", json={**REFERENCE_FORM, "monthly_invoice_volume": "lots"}
        )
        assert resp.status_code == 422
        assert resp.json()["detail"] == "Monthly invoice volume must be greater than 0"

    @pytest.mark.asyncio
    async def test_empty_staff_rejected(self, client):
        resp = await client.post("/api/calculate", json={**REFERENCE_FORM, "num_ap_staff": ""})
        assert resp.status_code == 422
        assert resp.json()["detail"] == "Number of AP staff must be greater than 0"

    @pytest.mark.asyncio
    async def test_constants_come_from_settings(self, client):
        app.dependency_overrides[get_settings] = lambda: Settings(
            calculation_delay_seconds=0.0, roi_boost_factor=1.0
        )
        resp = await client.post("/api/calculate", json=REFERENCE_FORM)
        assert resp.json()["results"]["monthly_savings"] == pytest.approx(39_750)

        constants = (await client.get("/api/constants")).json()
        assert constants["roi_boost_factor"] == 1.0

    @pytest.mark.asyncio
    async def test_session_notifications(self, client):
        session_id = await _new_session(client)
        resp = await client.post(
            "/api/calculate", params={"session_id": session_id}, json=REFERENCE_FORM
        )
        assert resp.status_code == 200

        history = stream_manager.history(session_id)
        assert [e.event_type for e in history] == [
            NotificationType.CALCULATION_STARTED,
            NotificationType.CALCULATION_COMPLETED,
        ]
        assert history[-1].data["message"] == "Calculation complete!"
        assert _sessions[session_id]["last_results"].monthly_savings == pytest.approx(43_725)

    @pytest.mark.asyncio
    async def test_rejection_notification(self, client):
        session_id = await _new_session(client)
        await client.post(
            "/api/calculate",
            params={"session_id": session_id},
            json={**REFERENCE_FORM, "num_ap_staff": "0"},
        )
        event = stream_manager.history(session_id)[-1]
        assert event.event_type == NotificationType.CALCULATION_REJECTED
        assert event.data["message"] == "Number of AP staff must be greater than 0"

    @pytest.mark.asyncio
    async def test_unknown_session_404(self, client):
        resp = await client.post(
            "/api/calculate", params={"session_id": "nope"}, json=REFERENCE_FORM
        )
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_tiny_implementation_cost(self, client):
        resp = await client.post(
            "/api/calculate", json={**REFERENCE_FORM, "one_time_implementation_cost": "1e-20"}
        )
        assert resp.status_code == 200
        assert resp.json()["display"]["roi_percentage"].endswith(".0%")

    @pytest.mark.asyncio
    async def test_overflowing_results_are_not_nulled(self, client):
        resp = await client.post(
            "/api/calculate",
            json={**REFERENCE_FORM, "monthly_invoice_volume": "1e308", "num_ap_staff": "10"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["inputs"]["monthly_invoice_volume"] == 1e308
        assert body["results"]["monthly_savings"] == "Infinity"
        assert body["results"]["payback_months"] == 0.0
        assert body["display"]["monthly_savings"] == "$∞"

    @pytest.mark.asyncio
    async def test_infinite_text_parses_to_zero(self, client):
        resp = await client.post(
            "/api/calculate", json={**REFERENCE_FORM, "monthly_invoice_volume": "Infinity"}
        )
        assert resp.status_code == 422
        assert resp.json()["detail"] == "Monthly invoice volume must be greater than 0"

        resp = await client.post("/api/calculate", json={**REFERENCE_FORM, "hourly_wage": "Infinity"})
        assert resp.status_code == 200
        assert resp.json()["inputs"]["hourly_wage"] == 0
        assert resp.json()["results"]["breakdown"]["labor_cost_manual"] == 0

    @pytest.mark.asyncio
    async def test_engine_failure_is_reported(self, client):
        app.dependency_overrides[get_engine] = lambda: _BrokenEngine()
        session_id = await _new_session(client)
        resp = await client.post(
            "/api/calculate", params={"session_id": session_id}, json=REFERENCE_FORM
        )
        assert resp.status_code == 500
        assert resp.json()["detail"] == "Failed to calculate. Please try again."
        event = stream_manager.history(session_id)[-1]
        assert event.event_type == NotificationType.CALCULATION_FAILED
        assert event.data["message"] == "Failed to calculate. Please try again."
        assert _sessions[session_id]["last_results"] is None


class TestScenarios:
    @pytest.mark.asyncio
    async def test_save_list_load_delete(self, client):
        session_id = await _new_session(client)
        base = f"/api/sessions/{session_id}/scenarios"

        first = (await client.post(base, json={"inputs": REFERENCE_FORM})).json()
        second = (
            await client.post(
                base, json={"inputs": {**REFERENCE_FORM, "scenario_name": "Bigger team", "num_ap_staff": "5"}}
            )
        ).json()
        assert first["results"]["monthly_savings"] == pytest.approx(43_725)

        listed = (await client.get(base)).json()
        assert [s["id"] for s in listed] == [second["id"], first["id"]]

        loaded = await client.get(f"{base}/{first['id']}")
        assert loaded.status_code == 200
        assert loaded.json()["inputs"] == first["inputs"]
        assert loaded.json()["results"] == first["results"]

        deleted = await client.delete(f"{base}/{second['id']}")
        assert deleted.status_code == 204
        assert [s["id"] for s in (await client.get(base)).json()] == [first["id"]]

        messages = [e.data["message"] for e in stream_manager.history(session_id)]
        assert messages == [
            'Scenario "Reference" saved!',
            'Scenario "Bigger team" saved!',
            'Loaded "Reference"',
            'Deleted "Bigger team"',
        ]

    @pytest.mark.asyncio
    async def test_stale_results_conflict(self, client):
        session_id = await _new_session(client)
        calc = (await client.post("/api/calculate", json=REFERENCE_FORM)).json()
        resp = await client.post(
            f"/api/sessions/{session_id}/scenarios",
            json={
                "inputs": {**REFERENCE_FORM, "hourly_wage": "40"},
                "results": calc["results"],
            },
        )
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_invalid_inputs_not_saved(self, client):
        session_id = await _new_session(client)
        resp = await client.post(
            f"/api/sessions/{session_id}/scenarios",
            json={"inputs": {**REFERENCE_FORM, "monthly_invoice_volume": "0"}},
        )
        assert resp.status_code == 422
        assert (await client.get(f"/api/sessions/{session_id}/scenarios")).json() == []

    @pytest.mark.asyncio
    async def test_unknown_scenario_404(self, client):
        session_id = await _new_session(client)
        base = f"/api/sessions/{session_id}/scenarios"
        assert (await client.get(f"{base}/missing")).status_code == 404
        assert (await client.delete(f"{base}/missing")).status_code == 404

    @pytest.mark.asyncio
    async def test_end_session(self, client):
        session_id = await _new_session(client)
        assert (await client.delete(f"/api/sessions/{session_id}")).status_code == 204
        assert (await client.get(f"/api/sessions/{session_id}/scenarios")).status_code == 404

    @pytest.mark.asyncio
    async def test_overflowed_scenario_round_trips(self, client):
        session_id = await _new_session(client)
        form = {**REFERENCE_FORM, "monthly_invoice_volume": "1e308", "num_ap_staff": "10"}
        calc = (await client.post("/api/calculate", json=form)).json()

        saved = await client.post(
            f"/api/sessions/{session_id}/scenarios",
            json={"inputs": calc["inputs"], "results": calc["results"]},
        )
        assert saved.status_code == 200
        loaded = (
            await client.get(f"/api/sessions/{session_id}/scenarios/{saved.json()['id']}")
        ).json()
        assert loaded["inputs"] == calc["inputs"]
        assert loaded["results"] == calc["results"]


class TestSessions:
    @pytest.mark.asyncio
    async def test_notifications_polling(self, client):
        session_id = await _new_session(client)
        await client.post(
            "/api/calculate", params={"session_id": session_id}, json=REFERENCE_FORM
        )
        resp = await client.get(f"/api/sessions/{session_id}/notifications")
        assert resp.status_code == 200
        assert [(n["event_type"], n["sequence_id"], n["message"]) for n in resp.json()] == [
            ("calculation_started", 1, "Calculating..."),
            ("calculation_completed", 2, "Calculation complete!"),
        ]

        later = await client.get(
            f"/api/sessions/{session_id}/notifications", params={"after": 1}
        )
        assert [n["sequence_id"] for n in later.json()] == [2]

    @pytest.mark.asyncio
    async def test_notifications_unknown_session_404(self, client):
        assert (await client.get("/api/sessions/nope/notifications")).status_code == 404

    @pytest.mark.asyncio
    async def test_end_session_closes_open_streams(self, client):
        session_id = await _new_session(client)
        gen = stream_manager.event_generator(session_id)
        assert await gen.__anext__() == ": connected\n\n"

        async def next_chunk():
            return await gen.__anext__()

        pending = asyncio.create_task(next_chunk())
        await asyncio.sleep(0)
        assert (await client.delete(f"/api/sessions/{session_id}")).status_code == 204
        with pytest.raises(StopAsyncIteration):
            await asyncio.wait_for(pending, timeout=1.0)

    @pytest.mark.asyncio
    async def test_late_notification_after_end_is_dropped(self, client):
        session_id = await _new_session(client)
        await client.delete(f"/api/sessions/{session_id}")
        event = await stream_manager.notify(
            session_id, NotificationType.CALCULATION_COMPLETED, {"message": "late"}
        )
        assert event is None
        assert stream_manager.history(session_id) == []

    def test_last_event_id_parsing(self, caplog):
        assert _parse_last_event_id(None) is None
        assert _parse_last_event_id("7") == 7
        with caplog.at_level(logging.WARNING, logger="invoice_roi.main"):
            assert _parse_last_event_id("seven") is None
        assert "malformed Last-Event-ID" in caplog.text


class _FailingDispatcher(ReportDispatcher):
    async def dispatch(self, request):
        raise ConnectionError("mail relay unreachable")

    async def health_check(self):
        return False


class TestReports:
    @pytest.mark.asyncio
    async def test_report_sent(self, client):
        session_id = await _new_session(client)
        resp = await client.post(
            f"/api/sessions/{session_id}/reports",
            json={"inputs": REFERENCE_FORM, "email": "controller@example.com"},
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "status": "sent",
            "email": "controller@example.com",
            "message": "Report sent to controller@example.com!",
        }
        types = [e.event_type for e in stream_manager.history(session_id)]
        assert types == [NotificationType.REPORT_REQUESTED, NotificationType.REPORT_SENT]

    @pytest.mark.asyncio
    async def test_dispatcher_receives_computed_results(self, client):
        dispatcher = AsyncMock(spec=ReportDispatcher)
        dispatcher.dispatch.return_value = True
        app.dependency_overrides[get_report_dispatcher] = lambda: dispatcher

        session_id = await _new_session(client)
        await client.post(
            f"/api/sessions/{session_id}/reports",
            json={"inputs": REFERENCE_FORM, "email": "a@b.com"},
        )
        request = dispatcher.dispatch.await_args.args[0]
        assert request.email == "a@b.com"
        assert request.results.monthly_savings == pytest.approx(43_725)

    @pytest.mark.asyncio
    async def test_invalid_email_never_dispatched(self, client):
        dispatcher = AsyncMock(spec=ReportDispatcher)
        app.dependency_overrides[get_report_dispatcher] = lambda: dispatcher

        session_id = await _new_session(client)
        resp = await client.post(
            f"/api/sessions/{session_id}/reports",
            json={"inputs": REFERENCE_FORM, "email": "not-an-email"},
        )
        assert resp.status_code == 422
        assert resp.json()["detail"] == "Please enter a valid email address"
        dispatcher.dispatch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dispatch_failure_is_retryable_and_keeps_results(self, client):
        app.dependency_overrides[get_report_dispatcher] = lambda: _FailingDispatcher()

        session_id = await _new_session(client)
        await client.post(
            "/api/calculate", params={"session_id": session_id}, json=REFERENCE_FORM
        )
        before = _sessions[session_id]["last_results"]

        resp = await client.post(
            f"/api/sessions/{session_id}/reports",
            json={"inputs": REFERENCE_FORM, "email": "a@b.com"},
        )
        assert resp.status_code == 502
        assert resp.json()["detail"] == "Failed to generate report. Please try again."
        assert _sessions[session_id]["last_results"] is before
        assert stream_manager.history(session_id)[-1].event_type == NotificationType.REPORT_FAILED


class TestAPI:
    def test_stream_endpoint_returns_event_stream_content_type(self, server):
        session_id = httpx.post(f"{server.base_url}/api/sessions").json()["session_id"]
        with httpx.stream(
            "GET", f"{server.base_url}/api/sessions/{session_id}/stream", timeout=5.0
        ) as resp:
            assert resp.headers["content-type"] == "text/event-stream; charset=utf-8"

    @pytest.mark.asyncio
    async def test_cors_allows_frontend_origin(self, client):
        resp = await client.options(
            "/api/calculate",
            headers={
                "Origin": "http://localhost:8080",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert resp.headers.get("access-control-allow-origin") == "http://localhost:8080"

    @pytest.mark.asyncio
    async def test_health_check_endpoint(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}
