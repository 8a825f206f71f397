"""Shared fixtures for the test suite."""

from __future__ import annotations

import inspect
from typing import Any, Callable

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from perflab.dependencies import get_twin_session
from perflab.main import app
from perflab.twin.session import TwinSession
from perflab.twin.transport import TwinTransport

BASE_URL = "http://twin.test"


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------

def make_log_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "timestamp": "2026-02-15T12:00:00Z",
        "modality": "Strength",
        "duration_minutes": 45,
        "session_rpe": 7,
        "sleep_quality": 5,
        "life_stress_inverse": 5,
        "avg_rir": 2,
    }
    payload.update(overrides)
    return payload


def make_state_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "timestamp": "2026-02-15T12:00:05Z",
        "c_met_aerobic": 52.3,
        "c_nm_force": 61.0,
        "c_struct": 48.7,
        "b_met_anaerobic": 20.25,
        "f_met_systemic": 35.0,
        "f_nm_peripheral": 42.5,
        "f_nm_central": 18.0,
        "f_struct_damage": 27.4,
        "s_struct_signal": 3.2,
        "habit_strength": 0.64,
        "skill_state": {"squat": 0.8, "deadlift": 0.55},
    }
    payload.update(overrides)
    return payload


def make_prescription_payload(goal: str = "Strength", **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "type": goal,
        "focus": f"{goal} focus",
        "rationale": "Fatigue is moderate; capacity headroom remains.",
        "duration_min": 60,
    }
    payload.update(overrides)
    return payload


def make_dose_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "d_met_systemic": 12.5,
        "d_nm_peripheral": 20.0,
        "d_nm_central": 8.25,
        "d_struct_damage": 5.0,
        "d_struct_signal": 4.0,
    }
    payload.update(overrides)
    return payload


def make_metrics_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "vo2_max": 48.26,
        "vo2_category": "Good",
        "result_category": "Above Average",
        "fatigue_percent": 12.34,
        "fatigue_profile": "Balanced",
        "race_pace_sec_per_mile": 465.0,
        "zones": [
            {"name": "Easy", "slow_pace_sec": 600.0, "fast_pace_sec": 560.0, "notes": "Conversational"},
            {"name": "Threshold", "slow_pace_sec": 500.4, "fast_pace_sec": 489.6, "notes": ""},
        ],
    }
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# Fake upstream twin service (httpx.MockTransport handler)
# ---------------------------------------------------------------------------

Handler = Callable[[httpx.Request], Any]


class FakeTwinService:
    """Route table standing in for the digital-twin service. Records every request."""

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Handler] = {
            ("GET", "/ping"): lambda req: httpx.Response(200, json={"status": "ok"}),
            ("GET", "/v1/next-session"): lambda req: httpx.Response(
                200, json=make_prescription_payload(req.url.params.get("goal", "Strength"))
            ),
            ("POST", "/v1/log-workout"): lambda req: httpx.Response(200, json=make_state_payload()),
            ("POST", "/v1/simulate-dose"): lambda req: httpx.Response(200, json=make_dose_payload()),
            ("POST", "/compute-metrics"): lambda req: httpx.Response(200, json=make_metrics_payload()),
        }

    def on(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method, path)] = handler

    def paths(self) -> list[str]:
        return [req.url.path for req in self.calls]

    def count(self, path: str) -> int:
        return self.paths().count(path)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        result = handler(request)
        if inspect.isawaitable(result):
            result = await result
        return result


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def service() -> FakeTwinService:
    return FakeTwinService()


@pytest.fixture()
async def http_client(service):
    async with httpx.AsyncClient(transport=httpx.MockTransport(service)) as client:
        yield client


@pytest.fixture()
def transport(http_client) -> TwinTransport:
    return TwinTransport(BASE_URL, client=http_client)


@pytest.fixture()
def unconfigured_transport(http_client) -> TwinTransport:
    return TwinTransport(None, client=http_client)


@pytest.fixture()
def session(transport) -> TwinSession:
    return TwinSession(transport)


@pytest.fixture()
def override_session(session):
    """Override the FastAPI dependency so no lifespan or real service is needed."""
    async def _override():
        return session

    app.dependency_overrides[get_twin_session] = _override
    yield session
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_session):
    asgi = ASGITransport(app=app)
    async with AsyncClient(transport=asgi, base_url="http://test") as ac:
        yield ac
