"""
Coin store API endpoints.

Handles:
- GET /catalog - Browse the catalog with owned counts
- GET /balance - Get the coin balance
- POST /buy - Purchase an item
- GET /owned - List owned items
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from focusflow.models.store import (
    CoinBalance,
    OwnedItem,
    PurchaseRequest,
    PurchaseResponse,
    StoreItemWithOwnership,
)
from focusflow.services.coin_service import CoinService
from focusflow.services.owned_item_service import get_owned_item_service
from focusflow.services.settings_store import get_settings_store
from focusflow.services.store_service import StoreService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store_service() -> StoreService:
    """Dependency to get StoreService instance."""
    return StoreService(
        coins=CoinService(get_settings_store()),
        owned_items=get_owned_item_service(),
    )


@router.get("/catalog", response_model=list[StoreItemWithOwnership])
async def get_catalog(
    store_service: StoreService = Depends(get_store_service),
) -> list[StoreItemWithOwnership]:
    return await store_service.get_catalog()


@router.get("/balance", response_model=CoinBalance)
async def get_balance(
    store_service: StoreService = Depends(get_store_service),
) -> CoinBalance:
    return CoinBalance(coins=await store_service.get_balance())


@router.post("/buy", response_model=PurchaseResponse)
async def purchase_item(
    purchase_request: PurchaseRequest,
    store_service: StoreService = Depends(get_store_service),
) -> PurchaseResponse:
    """
    Purchase an item.

    Returns 402 when the balance does not cover the price and 409 when a
    single-purchase item is already owned.
    """
    result = await store_service.purchase(purchase_request.item_id, purchase_request.quantity)
    logger.info(
        "Store purchase: %s x%d",
        purchase_request.item_id,
        purchase_request.quantity,
        extra={"item_id": purchase_request.item_id},
    )
    return result


@router.get("/owned", response_model=list[OwnedItem])
async def get_owned_items(
    item_id: Optional[str] = None,
    store_service: StoreService = Depends(get_store_service),
) -> list[OwnedItem]:
    return await store_service.get_owned_items(item_id=item_id)
