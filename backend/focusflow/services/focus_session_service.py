"""
Focus session history.

Handles:
- Recording resolved sessions (success or failure)
- Listing sessions, most recent first
- Looking up the last session
- Deleting a session on explicit user request
"""

import logging
from typing import Optional

from supabase import Client

from focusflow.core.constants import DEFAULT_PAGE_SIZE
from focusflow.core.database import get_supabase
from focusflow.models.session import (
    FocusSession,
    FocusSessionCreate,
    FocusSessionNotFoundError,
    SessionEngineError,
)

logger = logging.getLogger(__name__)

TABLE = "focus_sessions"


class FocusSessionService:
    """Service for focus session records."""

    def __init__(self, supabase: Optional[Client] = None):
        self._supabase = supabase

    @property
    def supabase(self) -> Client:
        if self._supabase is None:
            self._supabase = get_supabase()
        return self._supabase

    def create_session(self, data: FocusSessionCreate) -> FocusSession:
        result = self.supabase.table(TABLE).insert(data.model_dump(mode="json")).execute()

        if not result.data:
            raise SessionEngineError("Failed to record focus session")

        return FocusSession(**result.data[0])

    def get_session(self, session_id: str) -> FocusSession:
        result = self.supabase.table(TABLE).select("*").eq("id", session_id).execute()

        if not result.data:
            raise FocusSessionNotFoundError(f"Focus session {session_id} not found")

        return FocusSession(**result.data[0])

    def list_sessions(
        self,
        limit: int = DEFAULT_PAGE_SIZE,
        task_id: Optional[str] = None,
    ) -> list[FocusSession]:
        """
        List sessions ordered by start date, newest first.

        Query failures are logged and reported as an empty history.
        """
        try:
            query = self.supabase.table(TABLE).select("*")
            if task_id:
                query = query.eq("task_id", task_id)
            result = query.order("start_date", desc=True).limit(limit).execute()
        except Exception:
            logger.warning("Focus session query failed", exc_info=True)
            return []

        if not result.data:
            return []

        return [FocusSession(**row) for row in result.data]

    def get_last_session(self) -> Optional[FocusSession]:
        sessions = self.list_sessions(limit=1)
        return sessions[0] if sessions else None

    def delete_session(self, session_id: str) -> None:
        result = self.supabase.table(TABLE).delete().eq("id", session_id).execute()

        if not result.data:
            raise FocusSessionNotFoundError(f"Focus session {session_id} not found")

        logger.info("Deleted focus session %s", session_id)
