"""Business logic services for the FocusFlow API."""

from focusflow.services.coin_service import CoinService
from focusflow.services.owned_item_service import OwnedItemService
from focusflow.services.session_engine import SessionEngine
from focusflow.services.settings_store import SettingsStore

__all__ = [
    "CoinService",
    "OwnedItemService",
    "SessionEngine",
    "SettingsStore",
]
