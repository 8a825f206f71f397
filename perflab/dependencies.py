"""Request-scoped access to the process-wide twin session."""

from fastapi import HTTPException, Request

from perflab.twin.session import TwinSession


async def get_twin_session(request: Request) -> TwinSession:
    session = getattr(request.app.state, "twin_session", None)
    if session is None or session.closed:
        raise HTTPException(status_code=503, detail="Twin session is not available")
    return session
