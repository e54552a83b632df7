"""
Slack notification side channel.

SlackService wraps the three Slack Web API calls the app makes. Each call
reads its configuration from the settings store and returns None when the
feature is disabled or unconfigured. NotificationDispatcher runs calls as
fire-and-forget tasks: failures are logged and never reach the caller.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, Optional

import httpx

from focusflow.core.config import get_settings
from focusflow.core.redis import SettingsKeys
from focusflow.models.settings import (
    SlackAPIError,
    SlackAPIResponse,
    SlackNotConfiguredError,
)
from focusflow.services.settings_store import SettingsStore

logger = logging.getLogger(__name__)


class SlackService:
    """Posts messages and sets the user status through the Slack Web API."""

    def __init__(
        self,
        settings_store: Optional[SettingsStore] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._store = settings_store
        self._client = client

    @property
    def store(self) -> SettingsStore:
        if self._store is None:
            self._store = SettingsStore()
        return self._store

    async def _make_request(
        self, endpoint: str, token: str, payload: Optional[dict[str, Any]] = None
    ) -> SlackAPIResponse:
        settings = get_settings()
        url = f"{settings.slack_api_base_url}/{endpoint}"
        headers = {"Authorization": f"Bearer {token}"}

        if self._client is not None:
            response = await self._client.post(
                url, headers=headers, json=payload, timeout=settings.slack_timeout_seconds
            )
        else:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url, headers=headers, json=payload, timeout=settings.slack_timeout_seconds
                )
        response.raise_for_status()
        return SlackAPIResponse(**response.json())

    async def post_message(self, text: str) -> Optional[SlackAPIResponse]:
        if not await self.store.get_bool(SettingsKeys.SLACK_SHOULD_MESSAGE):
            return None
        token = await self.store.get_str(SettingsKeys.SLACK_API_KEY)
        channel = await self.store.get_str(SettingsKeys.SLACK_CHANNEL)
        if not token or not channel:
            return None

        return await self._make_request(
            "chat.postMessage", token, {"channel": channel, "text": text}
        )

    async def set_status(
        self, text: str, expiration: Optional[datetime] = None
    ) -> Optional[SlackAPIResponse]:
        if not await self.store.get_bool(SettingsKeys.SLACK_SHOULD_STATUS):
            return None
        token = await self.store.get_str(SettingsKeys.SLACK_STATUS_API_KEY)
        emoji = await self.store.get_str(SettingsKeys.SLACK_STATUS_EMOJI)
        if not token or not emoji:
            return None

        payload = {
            "profile": {
                "status_text": text,
                "status_emoji": emoji,
                "status_expiration": int(expiration.timestamp()) if expiration else 0,
            }
        }
        return await self._make_request("users.profile.set", token, payload)

    async def clear_status(self) -> Optional[SlackAPIResponse]:
        if not await self.store.get_bool(SettingsKeys.SLACK_SHOULD_STATUS):
            return None
        token = await self.store.get_str(SettingsKeys.SLACK_STATUS_API_KEY)
        if not token:
            return None

        payload = {
            "profile": {
                "status_text": "",
                "status_emoji": "",
                "status_expiration": 0,
            }
        }
        return await self._make_request("users.profile.set", token, payload)

    async def send_test_message(self) -> SlackAPIResponse:
        """
        Post "TEST" to the configured channel.

        Unlike the session notifications, errors are raised so the settings
        screen can report them.

        Raises:
            SlackNotConfiguredError: messaging disabled or token/channel missing
            SlackAPIError: Slack answered with ok=false
            httpx.HTTPError: transport failure
        """
        response = await self.post_message("TEST")
        if response is None:
            raise SlackNotConfiguredError("The API call failed.")
        if response.error:
            raise SlackAPIError(response.error)
        return response


class NotificationDispatcher:
    """Schedules notification coroutines without awaiting them."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def dispatch(self, coro: Awaitable[Any], description: str = "notification") -> asyncio.Task:
        task = asyncio.ensure_future(self._run(coro, description))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, coro: Awaitable[Any], description: str) -> None:
        try:
            await coro
        except Exception as e:
            logger.warning("Slack %s failed: %s", description, e)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for in-flight notifications (used at shutdown and in tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class SessionNotifier:
    """Session lifecycle messages sent through Slack."""

    def __init__(
        self,
        slack: Optional[SlackService] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        self.slack = slack or SlackService()
        self.dispatcher = dispatcher or NotificationDispatcher()

    def session_started(self, duration_seconds: int, planned_end: datetime) -> None:
        minutes = duration_seconds // 60
        self.dispatcher.dispatch(
            self.slack.post_message(f":brain: Started focusing for {minutes} minutes!"),
            "session start message",
        )
        self.dispatcher.dispatch(
            self.slack.set_status(f"Focusing for {minutes} minutes", expiration=planned_end),
            "session start status",
        )

    def session_completed(self, actual_seconds: float, coins: int) -> None:
        minutes = round(actual_seconds / 60)
        self.dispatcher.dispatch(
            self._finish(
                f":tada: Completed a {minutes}-minute focus session and earned {coins} coins!"
            ),
            "session completion",
        )

    def session_failed(self, actual_seconds: float, coins_lost: int) -> None:
        minutes = round(actual_seconds / 60)
        self.dispatcher.dispatch(
            self._finish(
                f":x: Left a focus session after {minutes} minutes and lost {coins_lost} coins."
            ),
            "session failure",
        )

    async def _finish(self, text: str) -> None:
        try:
            await self.slack.post_message(text)
        finally:
            await self.slack.clear_status()
