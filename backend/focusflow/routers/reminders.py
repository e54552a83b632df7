"""
Reminder API endpoints (read-only).

Both endpoints return an empty list until reminders sync is enabled in
settings.
"""

from fastapi import APIRouter, Depends

from focusflow.models.task import Reminder, ReminderList
from focusflow.services.reminder_service import ReminderService
from focusflow.services.settings_store import get_settings_store

router = APIRouter()


def get_reminder_service() -> ReminderService:
    return ReminderService(settings_store=get_settings_store())


@router.get("/lists", response_model=list[ReminderList])
async def get_reminder_lists(
    reminder_service: ReminderService = Depends(get_reminder_service),
) -> list[ReminderList]:
    return await reminder_service.get_reminder_lists()


@router.get("/", response_model=list[Reminder])
async def get_reminders(
    include_completed: bool = False,
    reminder_service: ReminderService = Depends(get_reminder_service),
) -> list[Reminder]:
    """Reminders from the selected list."""
    return await reminder_service.get_reminders(include_completed=include_completed)
