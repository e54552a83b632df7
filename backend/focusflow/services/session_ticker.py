"""
Once-per-second tick source for the session engine.

Started from the app lifespan; a failing tick is logged and the loop keeps
going.
"""

import asyncio
import logging
from typing import Optional

from focusflow.models.session import SessionOutcome
from focusflow.services.session_engine import SessionEngine

logger = logging.getLogger(__name__)


class SessionTicker:
    """Calls SessionEngine.tick() on a fixed interval until stopped."""

    def __init__(self, engine: SessionEngine, interval: float = 1.0):
        self.engine = engine
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info("Session ticker started (interval=%.1fs)", self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Session ticker stopped")

    async def tick_once(self) -> None:
        try:
            transition = await self.engine.tick()
        except Exception:
            logger.exception("Session tick failed")
            return
        if transition.outcome == SessionOutcome.COMPLETED:
            logger.debug("Tick completed session %s", transition.session.id)

    async def _run(self) -> None:
        while True:
            await self.tick_once()
            await asyncio.sleep(self.interval)
