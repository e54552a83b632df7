"""Shared pytest fixtures for test suite."""

import os
from typing import Optional
from unittest.mock import MagicMock

import pytest

# Required secrets must exist before any module reads Settings
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

from focusflow.services.coin_service import _reset_ledger_lock  # noqa: E402
from focusflow.services.settings_store import SettingsStore  # noqa: E402


@pytest.fixture(autouse=True)
def reset_ledger_lock():
    """Give each test (and its event loop) a fresh shared ledger lock."""
    _reset_ledger_lock()
    yield
    _reset_ledger_lock()


# =============================================================================
# In-memory Redis
# =============================================================================


class FakePipeline:
    """Queues set/delete commands and applies them on execute()."""

    def __init__(self, redis: "FakeRedis"):
        self._redis = redis
        self._commands: list = []

    async def __aenter__(self) -> "FakePipeline":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self._commands.clear()

    def set(self, key: str, value: str) -> "FakePipeline":
        self._commands.append(("set", key, value))
        return self

    def delete(self, *keys: str) -> "FakePipeline":
        self._commands.append(("delete", keys, None))
        return self

    async def execute(self) -> list:
        results = []
        for command, key, value in self._commands:
            if command == "set":
                results.append(await self._redis.set(key, value))
            else:
                results.append(await self._redis.delete(*key))
        self._commands.clear()
        self._redis.transactions += 1
        return results


class FakeRedis:
    """Just enough of redis.asyncio.Redis (decode_responses=True) for the settings store."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.published: list[tuple[str, str]] = []
        self.transactions = 0

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value) -> bool:
        self.data[key] = str(value)
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    async def incrby(self, key: str, amount: int) -> int:
        value = int(self.data.get(key, "0")) + amount
        self.data[key] = str(value)
        return value

    async def publish(self, channel: str, message: str) -> int:
        self.published.append((channel, message))
        return 0

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def settings_store(fake_redis) -> SettingsStore:
    """SettingsStore over the in-memory Redis."""
    return SettingsStore(redis=fake_redis)


# =============================================================================
# Mock Supabase Client
# =============================================================================


@pytest.fixture
def mock_supabase():
    """Create a mock Supabase client for database operations."""
    return MagicMock()
