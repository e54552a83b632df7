"""
Focus session API endpoints.

Lifecycle events that a mobile client would raise from its UI arrive here:
- GET /state - Timer snapshot
- POST /start - Start a focus run
- POST /background - App left the foreground (opens the grace window)
- POST /foreground - App returned (redeem a break pass or fail)
- POST /tick - Force a tick (the lifespan ticker runs one every second)
- POST /build-clear/ack - Consume the "clear build" flag after a failure

History:
- GET / - List sessions, newest first
- GET /last - Most recent session
- GET /{session_id} - Session details
- DELETE /{session_id} - Delete a session
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from focusflow.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from focusflow.models.session import (
    BuildClearResponse,
    FocusSession,
    SessionStatus,
    SessionTransition,
    StartSessionRequest,
)
from focusflow.services.focus_session_service import FocusSessionService
from focusflow.services.session_engine import SessionEngine, get_session_engine

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Dependency Injection
# =============================================================================


def get_engine() -> SessionEngine:
    """Get the shared SessionEngine."""
    return get_session_engine()


def get_focus_session_service() -> FocusSessionService:
    """Get FocusSessionService instance."""
    return FocusSessionService()


# =============================================================================
# Lifecycle
# =============================================================================


@router.get("/state", response_model=SessionStatus)
async def get_session_state(
    engine: SessionEngine = Depends(get_engine),
) -> SessionStatus:
    """Current phase, remaining time, balance and last session."""
    return await engine.status()


@router.post("/start", response_model=SessionTransition)
async def start_session(
    request: StartSessionRequest,
    engine: SessionEngine = Depends(get_engine),
) -> SessionTransition:
    """
    Start a focus session.

    Duration is in seconds, at least one minute and a whole number of
    minutes. Returns 409 if a run is already in progress.
    """
    return await engine.start(request.duration, task_id=request.task_id)


@router.post("/background", response_model=SessionTransition)
async def app_backgrounded(
    engine: SessionEngine = Depends(get_engine),
) -> SessionTransition:
    return await engine.interrupt()


@router.post("/foreground", response_model=SessionTransition)
async def app_foregrounded(
    engine: SessionEngine = Depends(get_engine),
) -> SessionTransition:
    """
    Resolve the grace window.

    A break pass covering the absence is consumed and the run continues;
    otherwise the session fails and coins are deducted.
    """
    return await engine.resume()


@router.post("/tick", response_model=SessionTransition)
async def tick_session(
    engine: SessionEngine = Depends(get_engine),
) -> SessionTransition:
    return await engine.tick()


@router.post("/build-clear/ack", response_model=BuildClearResponse)
async def acknowledge_build_clear(
    engine: SessionEngine = Depends(get_engine),
) -> BuildClearResponse:
    """Return whether the build must be cleared, resetting the flag."""
    return BuildClearResponse(should_clear=await engine.acknowledge_build_clear())


# =============================================================================
# History
# =============================================================================


@router.get("/", response_model=list[FocusSession])
async def list_sessions(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    task_id: Optional[str] = None,
    session_service: FocusSessionService = Depends(get_focus_session_service),
) -> list[FocusSession]:
    """List focus sessions, most recent first, optionally for one task."""
    return session_service.list_sessions(limit=limit, task_id=task_id)


@router.get("/last", response_model=Optional[FocusSession])
async def get_last_session(
    session_service: FocusSessionService = Depends(get_focus_session_service),
) -> Optional[FocusSession]:
    return session_service.get_last_session()


@router.get("/{session_id}", response_model=FocusSession)
async def get_session(
    session_id: str,
    session_service: FocusSessionService = Depends(get_focus_session_service),
) -> FocusSession:
    return session_service.get_session(session_id)


@router.delete("/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    session_service: FocusSessionService = Depends(get_focus_session_service),
) -> None:
    """Delete a session record. Coins are not refunded or reclaimed."""
    session_service.delete_session(session_id)
