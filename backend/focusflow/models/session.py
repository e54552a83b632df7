"""
Pydantic models for focus sessions and the session lifecycle.

Models:
- Enums: SessionPhase, SessionOutcome
- Database models: FocusSession, FocusSessionCreate
- Run state: SessionRunState
- Request models: StartSessionRequest
- Response models: SessionTransition, SessionStatus, BuildClearResponse
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from focusflow.core.constants import (
    DEFAULT_SESSION_SECONDS,
    MIN_SESSION_SECONDS,
    SESSION_STEP_SECONDS,
)


class SessionPhase(str, Enum):
    """Phase of the focus timer."""

    IDLE = "idle"  # No run in progress
    RUNNING = "running"  # Timer counting down
    FAILING_GRACE = "failing_grace"  # App left the foreground, awaiting return


class SessionOutcome(str, Enum):
    """How a lifecycle transition resolved the current run."""

    COMPLETED = "completed"
    FAILED = "failed"
    REDEEMED = "redeemed"  # Break pass forgave the absence, run continues


# --- Database Models ---


class FocusSessionCreate(BaseModel):
    """Row written to focus_sessions when a run resolves."""

    start_date: datetime
    planned_duration: int
    actual_duration: float
    coins_delta: int
    failed: bool = False
    task_id: Optional[str] = None


class FocusSession(FocusSessionCreate):
    """Historical focus session record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: Optional[datetime] = None


# --- Run State ---


class SessionRunState(BaseModel):
    """Transient timer state, persisted in the settings store until resolved."""

    phase: SessionPhase = SessionPhase.IDLE
    timer_start: Optional[datetime] = None
    configured_duration: int = 0
    accumulated_distraction: float = 0.0
    failing_instant: Optional[datetime] = None
    failing_session_start: Optional[datetime] = None
    task_id: Optional[str] = None

    @property
    def session_start(self) -> Optional[datetime]:
        """Start of the current run, whether running or in the grace window."""
        if self.phase == SessionPhase.RUNNING:
            return self.timer_start
        if self.phase == SessionPhase.FAILING_GRACE:
            return self.failing_session_start
        return None

    @property
    def planned_end(self) -> Optional[datetime]:
        start = self.session_start
        if start is None:
            return None
        return start + timedelta(seconds=self.configured_duration)


# --- Request Models ---


class StartSessionRequest(BaseModel):
    """Request to start a focus session."""

    duration: int = Field(
        DEFAULT_SESSION_SECONDS,
        ge=MIN_SESSION_SECONDS,
        description="Planned focus length in seconds (whole minutes)",
    )
    task_id: Optional[str] = None

    @field_validator("duration")
    @classmethod
    def validate_whole_minutes(cls, v: int) -> int:
        if v % SESSION_STEP_SECONDS != 0:
            raise ValueError("Duration must be a whole number of minutes")
        return v


# --- Response Models ---


class SessionTransition(BaseModel):
    """Result of a lifecycle operation."""

    phase: SessionPhase
    outcome: Optional[SessionOutcome] = None
    session: Optional[FocusSession] = None
    pass_consumed: Optional[str] = Field(None, description="Item id of the redeemed break pass")
    distraction_seconds: Optional[float] = None


class SessionStatus(BaseModel):
    """Snapshot of the timer for display."""

    phase: SessionPhase
    configured_duration: int = 0
    started_at: Optional[datetime] = None
    planned_end: Optional[datetime] = None
    remaining_seconds: float = 0.0
    accumulated_distraction: float = 0.0
    coins: int = 0
    build_clear_pending: bool = False
    task_id: Optional[str] = None
    last_session: Optional[FocusSession] = None


class BuildClearResponse(BaseModel):
    """Whether in-progress build decorations must be cleared."""

    should_clear: bool


# --- Exceptions ---


class SessionEngineError(Exception):
    """Base exception for session lifecycle errors."""

    pass


class SessionAlreadyActiveError(SessionEngineError):
    """A run is already in progress."""

    def __init__(self, phase: SessionPhase):
        self.phase = phase
        super().__init__(f"Cannot start a session while {phase.value}")


class InvalidSessionDurationError(SessionEngineError):
    """Requested duration is shorter than the minimum."""

    def __init__(self, duration: int):
        self.duration = duration
        super().__init__(
            f"Session duration {duration}s is below the {MIN_SESSION_SECONDS}s minimum"
        )


class FocusSessionNotFoundError(SessionEngineError):
    """Focus session record not found."""

    pass
