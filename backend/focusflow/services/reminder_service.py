"""
Read-only access to reminders mirrored from the external calendar.

Nothing is returned until the user grants access by enabling reminders
sync. Reminders are limited to the selected reminder list. Query failures
are logged and treated as an empty result.
"""

import logging
from typing import Optional

from supabase import Client

from focusflow.core.database import get_supabase
from focusflow.core.redis import SettingsKeys
from focusflow.models.task import Reminder, ReminderList
from focusflow.services.settings_store import SettingsStore

logger = logging.getLogger(__name__)


class ReminderService:
    """Lists reminder lists and reminders when sync is enabled."""

    def __init__(
        self,
        supabase: Optional[Client] = None,
        settings_store: Optional[SettingsStore] = None,
    ):
        self._supabase = supabase
        self._store = settings_store

    @property
    def supabase(self) -> Client:
        if self._supabase is None:
            self._supabase = get_supabase()
        return self._supabase

    @property
    def store(self) -> SettingsStore:
        if self._store is None:
            self._store = SettingsStore()
        return self._store

    async def access_granted(self) -> bool:
        return await self.store.get_bool(SettingsKeys.REMINDERS_SYNC_ENABLED)

    async def get_reminder_lists(self) -> list[ReminderList]:
        if not await self.access_granted():
            return []

        try:
            result = self.supabase.table("reminder_lists").select("*").order("title").execute()
        except Exception:
            logger.warning("Reminder list query failed", exc_info=True)
            return []

        return [ReminderList(**row) for row in (result.data or [])]

    async def get_reminders(self, include_completed: bool = False) -> list[Reminder]:
        if not await self.access_granted():
            return []

        list_id = await self.store.get_str(SettingsKeys.REMINDER_LIST_ID)
        if not list_id:
            return []

        try:
            query = self.supabase.table("reminders").select("*").eq("list_id", list_id)
            if not include_completed:
                query = query.eq("is_completed", False)
            result = query.execute()
        except Exception:
            logger.warning("Reminder query failed for list %s", list_id, exc_info=True)
            return []

        return [Reminder(**row) for row in (result.data or [])]
