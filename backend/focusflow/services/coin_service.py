"""
Coin ledger.

A single integer balance stored under the "coins" setting. The balance is
not clamped at zero: session penalties may push it below.
"""

import asyncio
import logging
from typing import Optional

from focusflow.core.redis import SettingsKeys
from focusflow.services.settings_store import SettingsStore

logger = logging.getLogger(__name__)

_ledger_lock: Optional[asyncio.Lock] = None


def get_ledger_lock() -> asyncio.Lock:
    """Lock shared by every read-check-write sequence on the coin and item ledgers."""
    global _ledger_lock
    if _ledger_lock is None:
        _ledger_lock = asyncio.Lock()
    return _ledger_lock


def _reset_ledger_lock() -> None:
    """Reset the shared lock (for testing)."""
    global _ledger_lock
    _ledger_lock = None


class CoinService:
    """Read and mutate the coin balance."""

    def __init__(self, settings_store: Optional[SettingsStore] = None):
        self._store = settings_store

    @property
    def store(self) -> SettingsStore:
        if self._store is None:
            self._store = SettingsStore()
        return self._store

    async def read(self) -> int:
        return await self.store.get_int(SettingsKeys.COINS, 0)

    async def set(self, value: int) -> None:
        await self.store.set(SettingsKeys.COINS, int(value))

    async def credit(self, amount: int) -> int:
        """Add coins. Returns the new balance."""
        if amount < 0:
            raise ValueError(f"Credit amount must be non-negative, got {amount}")
        return await self.adjust(amount)

    async def debit(self, amount: int) -> int:
        """Remove coins. Returns the new balance, which may be negative."""
        if amount < 0:
            raise ValueError(f"Debit amount must be non-negative, got {amount}")
        return await self.adjust(-amount)

    async def adjust(self, delta: int) -> int:
        """Apply a signed change in one atomic INCRBY."""
        new_balance = await self.store.increment(SettingsKeys.COINS, int(delta))
        logger.info("Coin balance adjusted by %+d to %d", delta, new_balance)
        return new_balance
