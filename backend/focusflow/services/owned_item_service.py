"""
Owned-item ledger.

Purchases are kept as a JSON list under the "owned_items" setting and cached
in memory. The cache reloads whenever the setting changes, so several
ledgers watching the same store converge on the last write.
"""

import logging
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from focusflow.core.redis import SettingsKeys
from focusflow.models.store import OwnedItem
from focusflow.services.settings_store import SettingsStore, get_settings_store

logger = logging.getLogger(__name__)

_owned_items_adapter = TypeAdapter(list[OwnedItem])


class OwnedItemService:
    """Append-only purchase records, queryable by item id."""

    def __init__(self, settings_store: Optional[SettingsStore] = None):
        self._store = settings_store
        self._items: list[OwnedItem] = []
        self._watching = False

    @property
    def store(self) -> SettingsStore:
        if self._store is None:
            self._store = SettingsStore()
        return self._store

    @property
    def items(self) -> list[OwnedItem]:
        return list(self._items)

    def watch_changes(self) -> None:
        """Reload the cache whenever the stored list changes."""
        if self._watching:
            return
        self.store.add_listener(SettingsKeys.OWNED_ITEMS, self._on_change)
        self._watching = True

    async def _on_change(self, name: str) -> None:
        await self.load()

    async def load(self) -> list[OwnedItem]:
        raw = await self.store.get_str(SettingsKeys.OWNED_ITEMS)
        if not raw:
            self._items = []
            return self.items
        try:
            self._items = _owned_items_adapter.validate_json(raw)
        except ValidationError:
            logger.warning("Stored owned items could not be decoded, treating as empty")
            self._items = []
        return self.items

    async def _save(self) -> None:
        payload = _owned_items_adapter.dump_json(self._items).decode("utf-8")
        await self.store.set(SettingsKeys.OWNED_ITEMS, payload)

    async def add(self, item_id: str, price: int) -> OwnedItem:
        owned = OwnedItem(item_id=item_id, purchase_price=price)
        self._items.append(owned)
        await self._save()
        return owned

    async def add_many(self, item_id: str, price: int, quantity: int) -> list[OwnedItem]:
        """Record several purchases of the same item with a single write."""
        added = [OwnedItem(item_id=item_id, purchase_price=price) for _ in range(quantity)]
        self._items.extend(added)
        await self._save()
        return added

    def count_of(self, item_id: str) -> int:
        return sum(1 for item in self._items if item.item_id == item_id)

    def list_of(self, item_id: str) -> list[OwnedItem]:
        """Items of one kind, oldest purchase first."""
        return [item for item in self._items if item.item_id == item_id]

    async def remove(self, item: OwnedItem) -> bool:
        remaining = [owned for owned in self._items if owned.id != item.id]
        if len(remaining) == len(self._items):
            return False
        self._items = remaining
        await self._save()
        return True


_owned_item_service: Optional[OwnedItemService] = None


def get_owned_item_service() -> OwnedItemService:
    """Process-wide ledger whose cache follows the settings store."""
    global _owned_item_service
    if _owned_item_service is None:
        _owned_item_service = OwnedItemService(get_settings_store())
        _owned_item_service.watch_changes()
    return _owned_item_service


def _reset_owned_item_service() -> None:
    """Reset the shared ledger (for testing)."""
    global _owned_item_service
    _owned_item_service = None
