"""Unit tests for OwnedItemService."""

import pytest

from focusflow.core.redis import SettingsKeys
from focusflow.services.owned_item_service import OwnedItemService


@pytest.fixture
def owned(settings_store) -> OwnedItemService:
    return OwnedItemService(settings_store)


class TestOwnedItemService:
    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_add_and_count(self, owned):
        await owned.add("break-1", 30)
        await owned.add("break-1", 30)
        await owned.add("break-5", 200)

        assert owned.count_of("break-1") == 2
        assert owned.count_of("break-5") == 1
        assert owned.count_of("icon-coral") == 0

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_list_of_keeps_purchase_order(self, owned):
        first = await owned.add("break-1", 30)
        await owned.add("break-5", 200)
        second = await owned.add("break-1", 25)

        assert [item.id for item in owned.list_of("break-1")] == [first.id, second.id]

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_remove(self, owned):
        item = await owned.add("break-1", 30)

        assert await owned.remove(item) is True
        assert owned.count_of("break-1") == 0
        assert await owned.remove(item) is False

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_add_many_single_write(self, owned, fake_redis):
        added = await owned.add_many("break-1", 30, 3)

        assert len(added) == 3
        assert len({item.id for item in added}) == 3
        assert fake_redis.transactions == 1

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_persisted_list_visible_to_other_instance(self, owned, settings_store):
        await owned.add("icon-frost", 60)

        other = OwnedItemService(settings_store)
        items = await other.load()

        assert [item.item_id for item in items] == ["icon-frost"]
        assert items[0].purchase_price == 60

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_corrupt_payload_loads_empty(self, owned, fake_redis):
        fake_redis.data[SettingsKeys.storage_key(SettingsKeys.OWNED_ITEMS)] = "{not json"
        assert await owned.load() == []

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_watch_changes_reloads_on_notification(self, owned, settings_store):
        owned.watch_changes()
        owned.watch_changes()

        writer = OwnedItemService(settings_store)
        await writer.add("break-5", 200)
        assert owned.count_of("break-5") == 0

        await settings_store.notify(SettingsKeys.OWNED_ITEMS)

        assert owned.count_of("break-5") == 1
        assert len(settings_store._listeners[SettingsKeys.OWNED_ITEMS]) == 1

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_items_is_a_copy(self, owned):
        await owned.add("break-1", 30)
        owned.items.clear()
        assert owned.count_of("break-1") == 1
