"""Dashboard HTTP router — drives the twin session, returns derived view state.

Operation failures are reported in the view's error slot, not as HTTP errors.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, Field

from perflab.dependencies import get_twin_session
from perflab.twin.builders import build_dashboard_view
from perflab.twin.goals_config import list_goals
from perflab.twin.models import DashboardView, PingResponse
from perflab.twin.presets import get_preset, list_presets
from perflab.twin.session import TwinSession

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class GoalUpdate(BaseModel):
    goal: str = Field(min_length=1)


def _view(session: TwinSession) -> DashboardView:
    return build_dashboard_view(session.snapshot())


@router.get("", response_model=DashboardView)
async def dashboard(session: TwinSession = Depends(get_twin_session)) -> DashboardView:
    return _view(session)


@router.get("/goals")
async def goals() -> list[dict]:
    return [{"id": g.id, "label": g.label, "description": g.description} for g in list_goals()]


@router.put("/goal", response_model=DashboardView)
async def set_goal(
    body: GoalUpdate,
    session: TwinSession = Depends(get_twin_session),
) -> DashboardView:
    await session.refresh_prescription(body.goal)
    return _view(session)


@router.post("/refresh", response_model=DashboardView)
async def refresh(session: TwinSession = Depends(get_twin_session)) -> DashboardView:
    await session.refresh_prescription()
    return _view(session)


# Log bodies arrive raw; client-side validation failures land in the view error slot.


@router.post("/log", response_model=DashboardView)
async def log_workout(
    body: dict[str, Any] = Body(...),
    session: TwinSession = Depends(get_twin_session),
) -> DashboardView:
    await session.commit_workout(body)
    return _view(session)


@router.post("/simulate", response_model=DashboardView)
async def simulate(
    body: dict[str, Any] = Body(...),
    session: TwinSession = Depends(get_twin_session),
) -> DashboardView:
    await session.simulate_dose(body)
    return _view(session)


@router.get("/presets")
async def presets_list() -> list[dict]:
    return [
        {
            "id": p.id,
            "label": p.label,
            "description": p.description,
            "log": p.build_log().to_payload(),
        }
        for p in list_presets()
    ]


@router.post("/presets/{preset_id}/log", response_model=DashboardView)
async def preset_log(
    preset_id: str,
    session: TwinSession = Depends(get_twin_session),
) -> DashboardView:
    preset = get_preset(preset_id)
    if preset is None:
        raise HTTPException(status_code=404, detail=f"Unknown preset: {preset_id}")
    await session.commit_workout(preset.build_log())
    return _view(session)


@router.post("/metrics", response_model=DashboardView)
async def metrics(
    body: dict[str, Any] = Body(...),
    session: TwinSession = Depends(get_twin_session),
) -> DashboardView:
    await session.compute_metrics(body)
    return _view(session)


@router.get("/ping")
async def ping(session: TwinSession = Depends(get_twin_session)) -> dict:
    result: PingResponse | None = await session.ping()
    if result is None:
        return {"status": "unreachable", "error": _view(session).error}
    return {"status": result.status}
