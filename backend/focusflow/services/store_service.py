"""
Store service for the coin shop.

Handles:
- Catalog browsing with owned counts
- Coin balance queries
- Purchases (quantity, single-purchase limit, balance check)
- Owned item listing
"""

import asyncio
import logging
from typing import Optional

from focusflow.models.store import (
    STORE_CATALOG,
    InsufficientCoinsError,
    ItemNotFoundError,
    OwnedItem,
    PurchaseLimitError,
    PurchaseResponse,
    StoreItem,
    StoreItemWithOwnership,
)
from focusflow.services.coin_service import CoinService, get_ledger_lock
from focusflow.services.owned_item_service import OwnedItemService

logger = logging.getLogger(__name__)


class StoreService:
    """Service for the catalog, balance and purchases."""

    def __init__(
        self,
        coins: Optional[CoinService] = None,
        owned_items: Optional[OwnedItemService] = None,
        catalog: Optional[list[StoreItem]] = None,
        lock: Optional[asyncio.Lock] = None,
    ):
        self.coins = coins or CoinService()
        self.owned_items = owned_items or OwnedItemService(self.coins.store)
        self._catalog = {item.id: item for item in (catalog or STORE_CATALOG)}
        self._lock = lock or get_ledger_lock()

    def get_item(self, item_id: str) -> StoreItem:
        item = self._catalog.get(item_id)
        if item is None:
            raise ItemNotFoundError(f"Item {item_id} not found")
        return item

    async def get_catalog(self) -> list[StoreItemWithOwnership]:
        await self.owned_items.load()
        return [
            StoreItemWithOwnership(**item.model_dump(), owned=self.owned_items.count_of(item.id))
            for item in self._catalog.values()
        ]

    async def get_balance(self) -> int:
        return await self.coins.read()

    async def get_owned_items(self, item_id: Optional[str] = None) -> list[OwnedItem]:
        await self.owned_items.load()
        if item_id:
            return self.owned_items.list_of(item_id)
        return self.owned_items.items

    async def purchase(self, item_id: str, quantity: int = 1) -> PurchaseResponse:
        """
        Buy one or more of a catalog item.

        Raises:
            ItemNotFoundError: Item is not in the catalog
            PurchaseLimitError: Single-purchase item already owned, or quantity > 1
            InsufficientCoinsError: Balance does not cover quantity * price
        """
        item = self.get_item(item_id)

        async with self._lock:
            await self.owned_items.load()

            if item.single and (quantity > 1 or self.owned_items.count_of(item_id) > 0):
                raise PurchaseLimitError(f"{item.name} can only be purchased once")

            cost = item.price * quantity
            balance = await self.coins.read()
            if cost > balance:
                raise InsufficientCoinsError(required=cost, available=balance)

            added = await self.owned_items.add_many(item.id, item.price, quantity)
            new_balance = await self.coins.debit(cost)
            owned_count = self.owned_items.count_of(item_id)

        logger.info(
            "Purchased %d x %s for %d coins", quantity, item_id, cost, extra={"item_id": item_id}
        )
        return PurchaseResponse(
            items=added,
            coins_spent=cost,
            balance=new_balance,
            owned_count=owned_count,
        )
