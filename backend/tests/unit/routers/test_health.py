"""Unit tests for health check endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from focusflow.routers.health import health_check, redis_health_check, root


class TestHealthCheck:
    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_returns_healthy_status(self) -> None:
        result = await health_check()
        assert result == {"status": "healthy", "service": "focusflow-api"}


class TestRedisHealthCheck:
    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_healthy_when_ping_succeeds(self) -> None:
        mock_redis = MagicMock()
        mock_redis.ping = AsyncMock(return_value=True)

        with patch("focusflow.routers.health.get_redis", return_value=mock_redis):
            result = await redis_health_check()

        assert result == {"status": "healthy", "service": "redis"}

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_unhealthy_when_not_initialized(self) -> None:
        with patch(
            "focusflow.routers.health.get_redis",
            side_effect=RuntimeError("Redis not initialized. Call init_redis() first."),
        ):
            result = await redis_health_check()

        assert result["status"] == "unhealthy"
        assert "not initialized" in result["error"]


class TestRoot:
    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_welcome_message(self) -> None:
        result = await root()
        assert result == {"message": "Welcome to FocusFlow API", "docs": "/docs"}
