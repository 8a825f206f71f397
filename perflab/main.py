from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from perflab.config import settings
from perflab.logger import setup_logger
from perflab.twin.router import router as dashboard_router
from perflab.twin.session import TwinSession
from perflab.twin.transport import TwinTransport


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logger(level=settings.log_level, json_logs=settings.log_json)
    transport = TwinTransport(settings.api_base_url, timeout=settings.request_timeout_s)
    session = TwinSession(transport, goal=settings.default_goal)
    app.state.twin_session = session
    logger.info(f"Twin transport configured={transport.configured}, goal={session.goal}")

    # Mount: first recommendation. Failures land in the session's error slot.
    await session.refresh_prescription()
    try:
        yield
    finally:
        session.close()
        await transport.aclose()


app = FastAPI(title="Performance Lab Digital Twin", version="0.1.0", lifespan=lifespan)
app.include_router(dashboard_router)


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "dashboard": {
            "view": "/dashboard",
            "goals": "/dashboard/goals",
            "goal": "/dashboard/goal",
            "refresh": "/dashboard/refresh",
            "log": "/dashboard/log",
            "simulate": "/dashboard/simulate",
            "presets": "/dashboard/presets",
            "presets_log": "/dashboard/presets/{id}/log",
            "metrics": "/dashboard/metrics",
            "ping": "/dashboard/ping",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
