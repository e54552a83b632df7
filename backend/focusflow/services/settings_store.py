"""
Settings store backed by Redis.

Holds process-wide scalar values (coins, timer run state, Slack
configuration, feature flags) keyed by string names. Every write publishes
the changed names on SETTINGS_CHANNEL so in-memory views (for example the
owned-item ledger) can reload; watch() is the subscriber loop.
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Mapping, Optional, Union

from redis.asyncio import Redis
from redis.exceptions import RedisError

from focusflow.core.redis import SETTINGS_CHANNEL, SettingsKeys, get_redis

logger = logging.getLogger(__name__)

SettingValue = Union[str, int, float, bool, datetime, None]
ChangeListener = Callable[[str], Awaitable[None]]


def _encode(value: SettingValue) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class SettingsStore:
    """Typed get/set over Redis with change notification."""

    def __init__(self, redis: Optional[Redis] = None):
        self._redis = redis
        self._listeners: dict[str, list[ChangeListener]] = {}

    @property
    def redis(self) -> Redis:
        if self._redis is None:
            self._redis = get_redis()
        return self._redis

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_str(self, name: str, default: Optional[str] = None) -> Optional[str]:
        raw = await self.redis.get(SettingsKeys.storage_key(name))
        return default if raw is None else raw

    async def get_int(self, name: str, default: int = 0) -> int:
        raw = await self.get_str(name)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            logger.warning("Setting %s is not an integer: %r", name, raw)
            return default

    async def get_float(self, name: str, default: float = 0.0) -> float:
        raw = await self.get_str(name)
        if raw is None:
            return default
        try:
            return float(raw)
        except ValueError:
            logger.warning("Setting %s is not a number: %r", name, raw)
            return default

    async def get_bool(self, name: str, default: bool = False) -> bool:
        raw = await self.get_str(name)
        if raw is None:
            return default
        return raw in ("1", "true", "True")

    async def get_datetime(self, name: str) -> Optional[datetime]:
        raw = await self.get_str(name)
        if raw is None:
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            logger.warning("Setting %s is not an ISO timestamp: %r", name, raw)
            return None

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def set(self, name: str, value: SettingValue) -> None:
        """Store a value; None deletes the key."""
        await self.set_many({name: value})

    async def set_many(self, values: Mapping[str, SettingValue]) -> None:
        """Write several values in one MULTI/EXEC transaction, then notify."""
        if not values:
            return
        async with self.redis.pipeline(transaction=True) as pipe:
            for name, value in values.items():
                encoded = _encode(value)
                if encoded is None:
                    pipe.delete(SettingsKeys.storage_key(name))
                else:
                    pipe.set(SettingsKeys.storage_key(name), encoded)
            await pipe.execute()
        await self.publish_change(*values.keys())

    async def delete(self, *names: str) -> None:
        await self.set_many({name: None for name in names})

    async def increment(self, name: str, amount: int) -> int:
        """Atomically add a signed amount to an integer value."""
        new_value = await self.redis.incrby(SettingsKeys.storage_key(name), amount)
        await self.publish_change(name)
        return int(new_value)

    # -------------------------------------------------------------------------
    # Change notification
    # -------------------------------------------------------------------------

    async def publish_change(self, *names: str) -> None:
        for name in names:
            try:
                await self.redis.publish(SETTINGS_CHANNEL, name)
            except RedisError:
                logger.warning("Failed to publish change for setting %s", name, exc_info=True)

    def add_listener(self, name: str, listener: ChangeListener) -> None:
        """Call listener(name) whenever the named setting changes."""
        self._listeners.setdefault(name, []).append(listener)

    def remove_listener(self, name: str, listener: ChangeListener) -> None:
        listeners = self._listeners.get(name, [])
        if listener in listeners:
            listeners.remove(listener)

    async def notify(self, name: str) -> None:
        """Run the listeners registered for a changed setting."""
        for listener in list(self._listeners.get(name, [])):
            try:
                await listener(name)
            except Exception:
                logger.exception("Settings listener failed for %s", name)

    async def watch(self) -> None:
        """Subscribe to SETTINGS_CHANNEL and dispatch changes until cancelled."""
        pubsub = self.redis.pubsub()
        await pubsub.subscribe(SETTINGS_CHANNEL)
        logger.info("Watching settings changes on %s", SETTINGS_CHANNEL)
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                await self.notify(message["data"])
        finally:
            await pubsub.unsubscribe(SETTINGS_CHANNEL)
            await pubsub.close()

    async def watch_forever(self, retry_delay: float = 1.0) -> None:
        """Run watch() until cancelled, resubscribing after a dropped connection."""
        while True:
            try:
                await self.watch()
            except Exception:
                logger.exception(
                    "Settings watcher failed, resubscribing in %.1fs", retry_delay
                )
            await asyncio.sleep(retry_delay)


_settings_store: Optional[SettingsStore] = None


def get_settings_store() -> SettingsStore:
    """Process-wide settings store sharing one set of change listeners."""
    global _settings_store
    if _settings_store is None:
        _settings_store = SettingsStore()
    return _settings_store


def _reset_settings_store() -> None:
    """Reset the shared store (for testing)."""
    global _settings_store
    _settings_store = None
