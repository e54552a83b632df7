"""Unit tests for SessionTicker."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from focusflow.models.session import SessionPhase, SessionTransition
from focusflow.services.session_ticker import SessionTicker


@pytest.fixture
def engine() -> MagicMock:
    mock = MagicMock()
    mock.tick = AsyncMock(return_value=SessionTransition(phase=SessionPhase.RUNNING))
    return mock


class TestSessionTicker:
    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_tick_once_calls_engine(self, engine):
        ticker = SessionTicker(engine)

        await ticker.tick_once()

        engine.tick.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_tick_failure_is_logged_not_raised(self, engine):
        engine.tick.side_effect = RuntimeError("redis down")
        ticker = SessionTicker(engine)

        await ticker.tick_once()

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_loop_ticks_until_stopped(self, engine):
        ticker = SessionTicker(engine, interval=0.01)

        ticker.start()
        assert ticker.running is True
        await asyncio.sleep(0.05)
        await ticker.stop()

        assert ticker.running is False
        assert engine.tick.await_count >= 2

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_loop_survives_failing_ticks(self, engine):
        engine.tick.side_effect = RuntimeError("boom")
        ticker = SessionTicker(engine, interval=0.01)

        ticker.start()
        await asyncio.sleep(0.05)

        assert ticker.running is True
        await ticker.stop()
        assert engine.tick.await_count >= 2

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_start_twice_keeps_one_task(self, engine):
        ticker = SessionTicker(engine, interval=0.01)

        ticker.start()
        task = ticker._task
        ticker.start()

        assert ticker._task is task
        await ticker.stop()

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_stop_without_start(self, engine):
        await SessionTicker(engine).stop()
