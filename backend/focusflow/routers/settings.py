"""
Settings API endpoints.

Handles:
- GET /slack - Slack integration settings (tokens masked)
- PUT /slack - Update Slack integration settings
- POST /slack/test - Post a test message to the configured channel
- PUT /reminders - Enable reminders sync and select a list
"""

import logging

from fastapi import APIRouter, Depends

from focusflow.core.redis import SettingsKeys
from focusflow.models.settings import (
    ReminderSyncSettings,
    SlackSettings,
    SlackSettingsUpdate,
    SlackTestResponse,
)
from focusflow.services.settings_store import SettingsStore, get_settings_store
from focusflow.services.slack_service import SlackService

logger = logging.getLogger(__name__)

router = APIRouter()

# Request field -> settings key
_SLACK_FIELDS = {
    "should_message": SettingsKeys.SLACK_SHOULD_MESSAGE,
    "api_key": SettingsKeys.SLACK_API_KEY,
    "channel": SettingsKeys.SLACK_CHANNEL,
    "should_status": SettingsKeys.SLACK_SHOULD_STATUS,
    "status_api_key": SettingsKeys.SLACK_STATUS_API_KEY,
    "status_emoji": SettingsKeys.SLACK_STATUS_EMOJI,
}


def get_store() -> SettingsStore:
    return get_settings_store()


def get_slack_service() -> SlackService:
    return SlackService(get_settings_store())


async def _read_slack_settings(store: SettingsStore) -> SlackSettings:
    return SlackSettings(
        should_message=await store.get_bool(SettingsKeys.SLACK_SHOULD_MESSAGE),
        channel=await store.get_str(SettingsKeys.SLACK_CHANNEL),
        has_api_key=bool(await store.get_str(SettingsKeys.SLACK_API_KEY)),
        should_status=await store.get_bool(SettingsKeys.SLACK_SHOULD_STATUS),
        status_emoji=await store.get_str(SettingsKeys.SLACK_STATUS_EMOJI),
        has_status_api_key=bool(await store.get_str(SettingsKeys.SLACK_STATUS_API_KEY)),
    )


@router.get("/slack", response_model=SlackSettings)
async def get_slack_settings(
    store: SettingsStore = Depends(get_store),
) -> SlackSettings:
    return await _read_slack_settings(store)


@router.put("/slack", response_model=SlackSettings)
async def update_slack_settings(
    request: SlackSettingsUpdate,
    store: SettingsStore = Depends(get_store),
) -> SlackSettings:
    """Update only the fields present in the request; an empty string clears a value."""
    updates = request.model_dump(exclude_unset=True)
    values = {
        _SLACK_FIELDS[field]: (value if value != "" else None)
        for field, value in updates.items()
    }
    await store.set_many(values)
    logger.info("Slack settings updated: %s", sorted(updates))
    return await _read_slack_settings(store)


@router.post("/slack/test", response_model=SlackTestResponse)
async def send_slack_test(
    slack_service: SlackService = Depends(get_slack_service),
) -> SlackTestResponse:
    """
    Post "TEST" to the configured channel.

    Returns 400 when messaging is not configured and 502 when Slack rejects
    the call.
    """
    await slack_service.send_test_message()
    return SlackTestResponse(success=True)


@router.put("/reminders", response_model=ReminderSyncSettings)
async def update_reminder_settings(
    request: ReminderSyncSettings,
    store: SettingsStore = Depends(get_store),
) -> ReminderSyncSettings:
    await store.set_many(
        {
            SettingsKeys.REMINDERS_SYNC_ENABLED: request.enabled,
            SettingsKeys.REMINDER_LIST_ID: request.list_id,
        }
    )
    return request
