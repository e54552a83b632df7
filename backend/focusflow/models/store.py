"""
Store models: catalog entries, owned items and purchases.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from focusflow.core.constants import (
    BREAK_PASS_LONG_ID,
    BREAK_PASS_SHORT_ID,
    MAX_PURCHASE_QUANTITY,
)


class ItemSpecial(str, Enum):
    """Extra behaviour unlocked by owning an item."""

    NONE = "none"
    APP_ICON = "app_icon"


class StoreItem(BaseModel):
    """Catalog entry."""

    id: str
    name: str
    description: str
    price: int
    image: Optional[str] = None
    special: ItemSpecial = ItemSpecial.NONE
    icon_name: Optional[str] = None
    single: bool = False  # at most one may ever be owned
    consumable: bool = False


STORE_CATALOG: list[StoreItem] = [
    StoreItem(
        id=BREAK_PASS_SHORT_ID,
        name="1-minute Break Pass",
        description=(
            "Use this pass to take a 1 minute break on your phone in a focus session! "
            "Automatically applied when you leave the app."
        ),
        price=30,
        consumable=True,
    ),
    StoreItem(
        id=BREAK_PASS_LONG_ID,
        name="5-minute Break Pass",
        description=(
            "Use this pass to take a 5 minute break on your phone in a focus session! "
            "Automatically applied when you leave the app."
        ),
        price=200,
        consumable=True,
    ),
    StoreItem(
        id="icon-rainbow",
        name="Rainbow App Icon",
        description="Unlock the Rainbow app icon, joyful and diverse like a burst of color!",
        price=60,
        image="icon_rainbow",
        special=ItemSpecial.APP_ICON,
        icon_name="AppIconRainbow",
        single=True,
    ),
    StoreItem(
        id="icon-coral",
        name="Coral App Icon",
        description="Unlock the Coral app icon, vibrant and warm like an ocean sunset!",
        price=60,
        image="icon_coral",
        special=ItemSpecial.APP_ICON,
        icon_name="AppIconCoral",
        single=True,
    ),
    StoreItem(
        id="icon-frost",
        name="Frost App Icon",
        description="Unlock the Frost app icon, cool and crisp like a winter morning!",
        price=60,
        image="icon_frost",
        special=ItemSpecial.APP_ICON,
        icon_name="AppIconFrost",
        single=True,
    ),
    StoreItem(
        id="icon-violet",
        name="Violet App Icon",
        description="Unlock the Violet app icon, mysterious and regal like a twilight sky!",
        price=60,
        image="icon_violet",
        special=ItemSpecial.APP_ICON,
        icon_name="AppIconViolet",
        single=True,
    ),
    StoreItem(
        id="icon-emerald",
        name="Emerald App Icon",
        description="Unlock the Emerald app icon, fresh and lively like a lush forest!",
        price=60,
        image="icon_emerald",
        special=ItemSpecial.APP_ICON,
        icon_name="AppIconEmerald",
        single=True,
    ),
]


class OwnedItem(BaseModel):
    """Record of a store purchase."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    item_id: str
    purchase_time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    purchase_price: int


class CoinBalance(BaseModel):
    """Current coin balance."""

    coins: int


class PurchaseRequest(BaseModel):
    """Request to buy one or more of a catalog item."""

    item_id: str
    quantity: int = Field(1, ge=1, le=MAX_PURCHASE_QUANTITY)


class PurchaseResponse(BaseModel):
    """Items added by a purchase, with the updated balance."""

    items: list[OwnedItem]
    coins_spent: int
    balance: int
    owned_count: int


class StoreItemWithOwnership(StoreItem):
    """Catalog entry annotated with how many the user owns."""

    owned: int = 0


# --- Exceptions ---


class StoreServiceError(Exception):
    """Base exception for store errors."""

    pass


class ItemNotFoundError(StoreServiceError):
    """Item is not in the catalog."""

    pass


class InsufficientCoinsError(StoreServiceError):
    """Not enough coins to make a purchase."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(f"Insufficient coins: required {required}, available {available}")


class PurchaseLimitError(StoreServiceError):
    """Single-purchase item already owned."""

    pass
