"""
User-editable settings models (Slack integration, reminders sync).
"""

from typing import Optional

from pydantic import BaseModel, Field

from focusflow.core.constants import SLACK_FIELD_MAX_LENGTH


class SlackAPIResponse(BaseModel):
    """Envelope returned by every Slack Web API method."""

    ok: bool
    error: Optional[str] = None


class SlackSettings(BaseModel):
    """Slack integration settings as shown to the user (tokens masked)."""

    should_message: bool = False
    channel: Optional[str] = None
    has_api_key: bool = False
    should_status: bool = False
    status_emoji: Optional[str] = None
    has_status_api_key: bool = False


class SlackSettingsUpdate(BaseModel):
    """Partial Slack settings update; omitted fields are left untouched."""

    should_message: Optional[bool] = None
    api_key: Optional[str] = Field(None, max_length=SLACK_FIELD_MAX_LENGTH)
    channel: Optional[str] = Field(None, max_length=SLACK_FIELD_MAX_LENGTH)
    should_status: Optional[bool] = None
    status_api_key: Optional[str] = Field(None, max_length=SLACK_FIELD_MAX_LENGTH)
    status_emoji: Optional[str] = Field(None, max_length=SLACK_FIELD_MAX_LENGTH)


class SlackTestResponse(BaseModel):
    success: bool
    message: str = "A test message was successfully sent to the specified channel!"


class ReminderSyncSettings(BaseModel):
    """Reminders sync settings."""

    enabled: bool = False
    list_id: Optional[str] = None


# --- Exceptions ---


class SlackServiceError(Exception):
    """Base exception for Slack errors."""

    pass


class SlackNotConfiguredError(SlackServiceError):
    """Messaging is disabled or missing a token/channel."""

    pass


class SlackAPIError(SlackServiceError):
    """Slack answered with ok=false."""

    def __init__(self, error: str):
        self.error = error
        super().__init__(f"The Slack API call failed with error: {error}.")
