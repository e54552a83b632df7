"""Unit tests for SettingsStore.

Tests:
- typed reads with defaults and undecodable values
- set/set_many in one transaction, None deletes
- increment
- change publication and listener dispatch
- watch_forever() resubscribing after a dropped connection
"""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError

from focusflow.core.redis import SETTINGS_CHANNEL, SettingsKeys
from focusflow.services.settings_store import SettingsStore


class TestReads:
    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_missing_values_return_defaults(self, settings_store):
        assert await settings_store.get_str("missing") is None
        assert await settings_store.get_str("missing", "x") == "x"
        assert await settings_store.get_int("missing", 7) == 7
        assert await settings_store.get_float("missing") == 0.0
        assert await settings_store.get_bool("missing") is False
        assert await settings_store.get_datetime("missing") is None

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_round_trips_typed_values(self, settings_store):
        instant = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
        await settings_store.set_many(
            {"an-int": 42, "a-float": 12.5, "a-bool": True, "a-date": instant}
        )

        assert await settings_store.get_int("an-int") == 42
        assert await settings_store.get_float("a-float") == 12.5
        assert await settings_store.get_bool("a-bool") is True
        assert await settings_store.get_datetime("a-date") == instant

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_undecodable_values_fall_back(self, settings_store, fake_redis):
        fake_redis.data[SettingsKeys.storage_key("n")] = "abc"
        fake_redis.data[SettingsKeys.storage_key("d")] = "yesterday"

        assert await settings_store.get_int("n", 3) == 3
        assert await settings_store.get_float("n", 1.5) == 1.5
        assert await settings_store.get_datetime("d") is None

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_bool_accepts_true_string(self, settings_store, fake_redis):
        fake_redis.data[SettingsKeys.storage_key("flag")] = "true"
        assert await settings_store.get_bool("flag") is True


class TestWrites:
    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_set_many_is_one_transaction(self, settings_store, fake_redis):
        await settings_store.set_many({"a": 1, "b": 2, "c": 3})

        assert fake_redis.transactions == 1
        assert fake_redis.data["settings:a"] == "1"
        assert fake_redis.data["settings:c"] == "3"

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_none_deletes(self, settings_store, fake_redis):
        await settings_store.set("a", "value")
        await settings_store.set("a", None)

        assert "settings:a" not in fake_redis.data

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_false_is_stored_not_deleted(self, settings_store, fake_redis):
        await settings_store.set("flag", False)
        assert fake_redis.data["settings:flag"] == "0"

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_empty_mapping_is_noop(self, settings_store, fake_redis):
        await settings_store.set_many({})
        assert fake_redis.transactions == 0
        assert fake_redis.published == []

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_delete_several(self, settings_store, fake_redis):
        await settings_store.set_many({"a": 1, "b": 2})
        await settings_store.delete("a", "b")
        assert fake_redis.data == {}

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_increment(self, settings_store):
        assert await settings_store.increment(SettingsKeys.COINS, 5) == 5
        assert await settings_store.increment(SettingsKeys.COINS, -8) == -3
        assert await settings_store.get_int(SettingsKeys.COINS) == -3


class TestChangeNotification:
    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_writes_publish_each_name(self, settings_store, fake_redis):
        await settings_store.set_many({"a": 1, "b": None})
        await settings_store.increment("c", 1)

        assert fake_redis.published == [
            (SETTINGS_CHANNEL, "a"),
            (SETTINGS_CHANNEL, "b"),
            (SETTINGS_CHANNEL, "c"),
        ]

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_publish_failure_is_logged_not_raised(self):
        redis = MagicMock()
        redis.publish = AsyncMock(side_effect=RedisError("down"))
        store = SettingsStore(redis=redis)

        await store.publish_change("coins")

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_notify_runs_listeners_for_name(self, settings_store):
        listener = AsyncMock()
        other = AsyncMock()
        settings_store.add_listener("owned_items", listener)
        settings_store.add_listener("coins", other)

        await settings_store.notify("owned_items")

        listener.assert_awaited_once_with("owned_items")
        other.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_failing_listener_does_not_stop_others(self, settings_store):
        failing = AsyncMock(side_effect=RuntimeError("boom"))
        ok = AsyncMock()
        settings_store.add_listener("coins", failing)
        settings_store.add_listener("coins", ok)

        await settings_store.notify("coins")

        ok.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_removed_listener_not_called(self, settings_store):
        listener = AsyncMock()
        settings_store.add_listener("coins", listener)
        settings_store.remove_listener("coins", listener)

        await settings_store.notify("coins")

        listener.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_watch_dispatches_messages(self):
        messages = [
            {"type": "subscribe", "data": 1},
            {"type": "message", "data": "owned_items"},
        ]

        async def listen():
            for message in messages:
                yield message

        pubsub = MagicMock()
        pubsub.subscribe = AsyncMock()
        pubsub.unsubscribe = AsyncMock()
        pubsub.close = AsyncMock()
        pubsub.listen = listen
        redis = MagicMock()
        redis.pubsub.return_value = pubsub

        store = SettingsStore(redis=redis)
        listener = AsyncMock()
        store.add_listener("owned_items", listener)

        await store.watch()

        pubsub.subscribe.assert_awaited_once_with(SETTINGS_CHANNEL)
        listener.assert_awaited_once_with("owned_items")
        pubsub.close.assert_awaited_once()


class TestWatchForever:
    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_resubscribes_after_dropped_connection(self, settings_store):
        settings_store.watch = AsyncMock(
            side_effect=[RedisConnectionError("connection lost"), asyncio.CancelledError()]
        )

        with patch(
            "focusflow.services.settings_store.asyncio.sleep", new_callable=AsyncMock
        ) as mock_sleep:
            with patch("focusflow.services.settings_store.logger") as mock_logger:
                with pytest.raises(asyncio.CancelledError):
                    await settings_store.watch_forever(retry_delay=0.5)

        assert settings_store.watch.await_count == 2
        mock_sleep.assert_awaited_once_with(0.5)
        mock_logger.exception.assert_called_once()

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_cancel_stops_loop(self, settings_store):
        started = asyncio.Event()

        async def watch():
            started.set()
            await asyncio.Event().wait()

        settings_store.watch = watch
        task = asyncio.create_task(settings_store.watch_forever())
        await started.wait()

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
