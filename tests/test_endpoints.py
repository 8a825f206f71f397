"""Endpoint tests — FastAPI app via httpx ASGITransport, fake twin service behind the session."""

from __future__ import annotations

import json

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from perflab.main import app

from tests.conftest import make_log_payload


class TestDashboardEndpoints:
    @pytest.mark.asyncio
    async def test_empty_dashboard(self, client):
        resp = await client.get("/dashboard")
        assert resp.status_code == 200
        body = resp.json()
        assert body["goal"] == "Strength"
        assert body["state"] is None
        assert body["prescription"] is None

    @pytest.mark.asyncio
    async def test_set_goal_refreshes(self, client, service):
        resp = await client.put("/dashboard/goal", json={"goal": "Power"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["goal"] == "Power"
        assert body["prescription"]["type"] == "Power"
        assert service.calls[-1].url.params["goal"] == "Power"

    @pytest.mark.asyncio
    async def test_empty_goal_rejected(self, client):
        resp = await client.put("/dashboard/goal", json={"goal": ""})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_refresh(self, client):
        resp = await client.post("/dashboard/refresh")
        assert resp.status_code == 200
        assert resp.json()["prescription"]["duration_display"] == "60 min"

    @pytest.mark.asyncio
    async def test_log_workout(self, client, service):
        resp = await client.post("/dashboard/log", json=make_log_payload())
        assert resp.status_code == 200
        body = resp.json()
        assert body["state"]["habit_strength_display"] == "64%"
        assert body["prescription"] is not None
        assert service.paths() == ["/v1/log-workout", "/v1/next-session"]

    @pytest.mark.asyncio
    async def test_invalid_log_reported_in_view(self, client, service):
        resp = await client.post("/dashboard/log", json=make_log_payload(duration_minutes=0))
        assert resp.status_code == 200
        assert "duration_minutes" in resp.json()["error"]
        assert service.calls == []

    @pytest.mark.asyncio
    async def test_simulate(self, client):
        resp = await client.post("/dashboard/simulate", json=make_log_payload())
        body = resp.json()
        assert body["dose"] is not None
        assert body["state"] is None

    @pytest.mark.asyncio
    async def test_upstream_error_in_view(self, client, service):
        service.on("POST", "/v1/log-workout", lambda req: httpx.Response(500, json={"detail": "internal"}))
        resp = await client.post("/dashboard/log", json=make_log_payload())
        assert resp.status_code == 200
        assert resp.json()["error"] == "internal"


class TestPresetEndpoints:
    @pytest.mark.asyncio
    async def test_list_presets(self, client):
        resp = await client.get("/dashboard/presets")
        assert resp.status_code == 200
        ids = {p["id"] for p in resp.json()}
        assert ids == {"default", "crash"}

    @pytest.mark.asyncio
    async def test_crash_preset_commits(self, client, service):
        resp = await client.post("/dashboard/presets/crash/log")
        assert resp.status_code == 200
        assert resp.json()["state"] is not None
        body = json.loads(service.calls[0].content)
        assert body["session_rpe"] == 10
        assert body["duration_minutes"] == 90

    @pytest.mark.asyncio
    async def test_unknown_preset_404(self, client):
        resp = await client.post("/dashboard/presets/nope/log")
        assert resp.status_code == 404


class TestMiscEndpoints:
    @pytest.mark.asyncio
    async def test_goals(self, client):
        resp = await client.get("/dashboard/goals")
        assert [g["id"] for g in resp.json()] == ["Strength", "Hypertrophy", "Power", "General"]

    @pytest.mark.asyncio
    async def test_metrics(self, client):
        resp = await client.post(
            "/dashboard/metrics",
            json={"age": 35, "sex": "male", "time_300m": "0:55", "time_1p5mi": "12:30"},
        )
        assert resp.json()["metrics"]["race_pace"] == "07:45 /mi"

    @pytest.mark.asyncio
    async def test_ping(self, client):
        resp = await client.get("/dashboard/ping")
        assert resp.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_ping_unreachable(self, client, service):
        service.on("GET", "/ping", lambda req: httpx.Response(503, text="down"))
        resp = await client.get("/dashboard/ping")
        assert resp.json() == {"status": "unreachable", "error": "down"}

    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestSessionDependency:
    @pytest.mark.asyncio
    async def test_no_session_is_503(self):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            resp = await ac.get("/dashboard")
        assert resp.status_code == 503
