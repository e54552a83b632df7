"""
Focus session lifecycle.

The timer is a three-phase state machine persisted in the settings store:

    idle --start--> running --tick (expired)--> idle            [completed]
    running --interrupt--> failing_grace
    failing_grace --resume--> running                             [redeemed]
    failing_grace --resume--> idle                                [failed]

Leaving the app does not fail a session straight away. The penalty is
decided when the user comes back: a short enough absence is forgiven by
consuming a break pass, anything else fails the run. A FocusSession record
is written only when a run completes or fails.

All transitions are serialized on the ledger lock, which store purchases
also hold. Notifications are dispatched as background tasks and never
affect the outcome.
"""

import asyncio
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Optional

from focusflow.core.constants import (
    BREAK_PASS_ORDER,
    MIN_SESSION_SECONDS,
    SECONDS_PER_COIN,
)
from focusflow.core.redis import SettingsKeys
from focusflow.models.session import (
    FocusSession,
    FocusSessionCreate,
    InvalidSessionDurationError,
    SessionAlreadyActiveError,
    SessionOutcome,
    SessionPhase,
    SessionRunState,
    SessionStatus,
    SessionTransition,
)
from focusflow.services.coin_service import CoinService, get_ledger_lock
from focusflow.services.focus_session_service import FocusSessionService
from focusflow.services.owned_item_service import OwnedItemService, get_owned_item_service
from focusflow.services.settings_store import SettingsStore, get_settings_store
from focusflow.services.slack_service import (
    NotificationDispatcher,
    SessionNotifier,
    SlackService,
)

logger = logging.getLogger(__name__)


def coins_for_focus(seconds: float) -> int:
    """Coins earned for a completed session: one per started minute."""
    return math.ceil(seconds / SECONDS_PER_COIN)


def penalty_for_balance(balance: int) -> int:
    """Coins lost on failure: half the balance, rounded up against the player.

    Not clamped: with a balance below -1 the result is zero or negative.
    """
    return -(-(balance + 1) // 2)


def _utcnow(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


class SessionEngine:
    """Drives the focus timer and settles rewards and penalties."""

    def __init__(
        self,
        settings_store: Optional[SettingsStore] = None,
        coins: Optional[CoinService] = None,
        owned_items: Optional[OwnedItemService] = None,
        sessions: Optional[FocusSessionService] = None,
        notifier: Optional[SessionNotifier] = None,
        lock: Optional[asyncio.Lock] = None,
    ):
        self.store = settings_store or SettingsStore()
        self.coins = coins or CoinService(self.store)
        self.owned_items = owned_items or OwnedItemService(self.store)
        self.sessions = sessions or FocusSessionService()
        self.notifier = notifier or SessionNotifier()
        # Held by StoreService.purchase too: one lock for every ledger read-check-write
        self._lock = lock or get_ledger_lock()

    # -------------------------------------------------------------------------
    # Run state persistence
    # -------------------------------------------------------------------------

    async def load_state(self) -> SessionRunState:
        phase_raw = await self.store.get_str(SettingsKeys.SESSION_PHASE)
        try:
            phase = SessionPhase(phase_raw) if phase_raw else SessionPhase.IDLE
        except ValueError:
            logger.warning("Unknown session phase %r in settings, treating as idle", phase_raw)
            phase = SessionPhase.IDLE

        state = SessionRunState(
            phase=phase,
            timer_start=await self.store.get_datetime(SettingsKeys.TIMER_START),
            configured_duration=await self.store.get_int(SettingsKeys.TIMER_DURATION, 0),
            accumulated_distraction=await self.store.get_float(
                SettingsKeys.DISTRACTION_TIME, 0.0
            ),
            failing_instant=await self.store.get_datetime(SettingsKeys.FAILING_INSTANT),
            failing_session_start=await self.store.get_datetime(
                SettingsKeys.FAILING_SESSION_START
            ),
            task_id=await self.store.get_str(SettingsKeys.TIMER_TASK_ID),
        )

        incomplete = (
            phase == SessionPhase.RUNNING and state.timer_start is None
        ) or (
            phase == SessionPhase.FAILING_GRACE
            and (state.failing_instant is None or state.failing_session_start is None)
        )
        if incomplete:
            logger.warning("Incomplete %s run state in settings, treating as idle", phase.value)
            return SessionRunState()
        return state

    async def _save_state(self, state: SessionRunState) -> None:
        values = {
            SettingsKeys.SESSION_PHASE: state.phase.value,
            SettingsKeys.TIMER_START: state.timer_start,
            SettingsKeys.TIMER_DURATION: state.configured_duration,
            SettingsKeys.TIMER_TASK_ID: state.task_id,
            SettingsKeys.DISTRACTION_TIME: state.accumulated_distraction,
            SettingsKeys.FAILING_INSTANT: state.failing_instant,
            SettingsKeys.FAILING_SESSION_START: state.failing_session_start,
        }
        await self.store.set_many(values)

    async def _clear_state(self, extra: Optional[dict] = None) -> None:
        values = {name: None for name in SettingsKeys.RUN_STATE}
        values.update(extra or {})
        await self.store.set_many(values)

    # -------------------------------------------------------------------------
    # Lifecycle operations
    # -------------------------------------------------------------------------

    async def start(
        self,
        duration: int,
        task_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SessionTransition:
        """
        Start a focus run.

        Args:
            duration: Planned length in seconds (at least one minute)
            task_id: Optional task the session counts towards
            now: Start instant (defaults to the current time)

        Raises:
            SessionAlreadyActiveError: A run is running or awaiting resolution
            InvalidSessionDurationError: duration is below the minimum
        """
        async with self._lock:
            state = await self.load_state()
            if state.phase != SessionPhase.IDLE:
                raise SessionAlreadyActiveError(state.phase)
            if duration < MIN_SESSION_SECONDS:
                raise InvalidSessionDurationError(duration)

            now = _utcnow(now)
            state = SessionRunState(
                phase=SessionPhase.RUNNING,
                timer_start=now,
                configured_duration=duration,
                accumulated_distraction=0.0,
                task_id=task_id,
            )
            await self._save_state(state)

            logger.info(
                "Focus session started for %ds", duration, extra={"session_phase": "running"}
            )
            self.notifier.session_started(duration, state.planned_end)
            return SessionTransition(phase=SessionPhase.RUNNING)

    async def tick(self, now: Optional[datetime] = None) -> SessionTransition:
        """Complete the run once its planned end has passed."""
        async with self._lock:
            state = await self.load_state()
            if state.phase != SessionPhase.RUNNING:
                return SessionTransition(phase=state.phase)

            if _utcnow(now) > state.planned_end:
                return await self._complete(state)
            return SessionTransition(phase=SessionPhase.RUNNING)

    async def interrupt(self, now: Optional[datetime] = None) -> SessionTransition:
        """
        The app left the foreground.

        Opens the grace window; nothing is recorded or charged until resume().
        A run whose planned end has already passed completes instead.
        """
        async with self._lock:
            state = await self.load_state()
            if state.phase != SessionPhase.RUNNING:
                return SessionTransition(phase=state.phase)

            now = _utcnow(now)
            if now > state.planned_end:
                return await self._complete(state)

            grace = state.model_copy(
                update={
                    "phase": SessionPhase.FAILING_GRACE,
                    "failing_instant": now,
                    "failing_session_start": state.timer_start,
                    "timer_start": None,
                }
            )
            await self._save_state(grace)
            logger.info("Focus session interrupted", extra={"session_phase": "failing_grace"})
            return SessionTransition(phase=SessionPhase.FAILING_GRACE)

    async def resume(self, now: Optional[datetime] = None) -> SessionTransition:
        """
        The app returned to the foreground.

        Redeems the absence with a break pass when one covers it, otherwise
        fails the run.
        """
        async with self._lock:
            state = await self.load_state()
            if state.phase != SessionPhase.FAILING_GRACE:
                return SessionTransition(phase=state.phase)

            now = _utcnow(now)
            session_end = state.failing_session_start + timedelta(
                seconds=state.configured_duration
            )
            distraction_end = min(now, session_end)
            distraction = max(0.0, (distraction_end - state.failing_instant).total_seconds())

            pass_id = await self._redeem_pass(distraction)
            if pass_id is None:
                return await self._fail(state)

            running = state.model_copy(
                update={
                    "phase": SessionPhase.RUNNING,
                    "timer_start": state.failing_session_start,
                    "accumulated_distraction": state.accumulated_distraction + distraction,
                    "failing_instant": None,
                    "failing_session_start": None,
                }
            )
            await self._save_state(running)
            logger.info(
                "Absence of %.0fs forgiven with %s",
                distraction,
                pass_id,
                extra={"outcome": SessionOutcome.REDEEMED.value, "item_id": pass_id},
            )
            return SessionTransition(
                phase=SessionPhase.RUNNING,
                outcome=SessionOutcome.REDEEMED,
                pass_consumed=pass_id,
                distraction_seconds=distraction,
            )

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    async def _redeem_pass(self, distraction: float) -> Optional[str]:
        """Consume the oldest pass of the shortest kind covering the absence."""
        await self.owned_items.load()
        for item_id, window_seconds in BREAK_PASS_ORDER:
            if distraction > window_seconds:
                continue
            passes = self.owned_items.list_of(item_id)
            if passes:
                await self.owned_items.remove(passes[0])
                return item_id
        return None

    async def _complete(self, state: SessionRunState) -> SessionTransition:
        actual = state.configured_duration - state.accumulated_distraction
        coins_won = coins_for_focus(actual)

        record = self.sessions.create_session(
            FocusSessionCreate(
                start_date=state.timer_start,
                planned_duration=state.configured_duration,
                actual_duration=actual,
                coins_delta=coins_won,
                failed=False,
                task_id=state.task_id,
            )
        )
        await self.coins.credit(coins_won)
        await self._clear_state()

        logger.info(
            "Focus session completed: %.0fs focused, +%d coins",
            actual,
            coins_won,
            extra={"outcome": SessionOutcome.COMPLETED.value, "coins_delta": coins_won},
        )
        self.notifier.session_completed(actual, coins_won)
        return SessionTransition(
            phase=SessionPhase.IDLE, outcome=SessionOutcome.COMPLETED, session=record
        )

    async def _fail(self, state: SessionRunState) -> SessionTransition:
        focused = (state.failing_instant - state.failing_session_start).total_seconds()
        actual = focused - state.accumulated_distraction
        balance = await self.coins.read()
        coins_lost = penalty_for_balance(balance)

        record = self.sessions.create_session(
            FocusSessionCreate(
                start_date=state.failing_session_start,
                planned_duration=state.configured_duration,
                actual_duration=actual,
                coins_delta=-coins_lost,
                failed=True,
                task_id=state.task_id,
            )
        )
        await self.coins.adjust(-coins_lost)
        await self._clear_state({SettingsKeys.BUILD_CLEAR_PENDING: True})

        logger.info(
            "Focus session failed after %.0fs, -%d coins",
            actual,
            coins_lost,
            extra={"outcome": SessionOutcome.FAILED.value, "coins_delta": -coins_lost},
        )
        self.notifier.session_failed(actual, coins_lost)
        return SessionTransition(
            phase=SessionPhase.IDLE, outcome=SessionOutcome.FAILED, session=record
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def status(self, now: Optional[datetime] = None) -> SessionStatus:
        state = await self.load_state()
        now = _utcnow(now)

        remaining = 0.0
        if state.phase == SessionPhase.RUNNING:
            remaining = max(0.0, (state.planned_end - now).total_seconds())
        elif state.phase == SessionPhase.FAILING_GRACE:
            remaining = max(0.0, (state.planned_end - state.failing_instant).total_seconds())

        return SessionStatus(
            phase=state.phase,
            configured_duration=state.configured_duration,
            started_at=state.session_start,
            planned_end=state.planned_end,
            remaining_seconds=remaining,
            accumulated_distraction=state.accumulated_distraction,
            coins=await self.coins.read(),
            build_clear_pending=await self.store.get_bool(SettingsKeys.BUILD_CLEAR_PENDING),
            task_id=state.task_id,
            last_session=self.sessions.get_last_session(),
        )

    async def acknowledge_build_clear(self) -> bool:
        """Return whether build decorations must be cleared, and reset the flag."""
        async with self._lock:
            pending = await self.store.get_bool(SettingsKeys.BUILD_CLEAR_PENDING)
            if pending:
                await self.store.delete(SettingsKeys.BUILD_CLEAR_PENDING)
            return pending

    def last_session(self) -> Optional[FocusSession]:
        return self.sessions.get_last_session()


_session_engine: Optional[SessionEngine] = None


def get_session_engine() -> SessionEngine:
    """Process-wide engine; all lifecycle events go through its lock."""
    global _session_engine
    if _session_engine is None:
        store = get_settings_store()
        _session_engine = SessionEngine(
            settings_store=store,
            coins=CoinService(store),
            owned_items=get_owned_item_service(),
            sessions=FocusSessionService(),
            notifier=SessionNotifier(SlackService(store), NotificationDispatcher()),
        )
    return _session_engine


def _reset_session_engine() -> None:
    """Reset the shared engine (for testing)."""
    global _session_engine
    _session_engine = None
