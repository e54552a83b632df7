import asyncio
import logging
from typing import Optional

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from focusflow.core.config import get_settings

logger = logging.getLogger(__name__)

_redis_pool: Optional[ConnectionPool] = None
_redis_client: Optional[Redis] = None

# Retry configuration
MAX_RETRIES = 3
RETRY_DELAYS = [1, 2, 4]  # Exponential backoff in seconds

# Pub/sub channel carrying the name of every settings key that changed
SETTINGS_CHANNEL = "settings:changed"


def _reset_redis() -> None:
    """Reset Redis state (for testing)."""
    global _redis_pool, _redis_client
    _redis_pool = None
    _redis_client = None


async def init_redis() -> None:
    """Initialize Redis connection pool with connectivity check.

    Retries connection up to 3 times with exponential backoff (1s, 2s, 4s).
    Raises RuntimeError if all attempts fail.
    """
    global _redis_pool, _redis_client

    if _redis_pool is None:
        _redis_pool = ConnectionPool.from_url(
            get_settings().redis_url,
            max_connections=10,
            decode_responses=True,
        )
        _redis_client = Redis(connection_pool=_redis_pool)

    last_error: Optional[Exception] = None

    for attempt in range(MAX_RETRIES):
        try:
            await _redis_client.ping()
            logger.info("Redis connection verified")
            return
        except RedisError as e:
            last_error = e
            if attempt < MAX_RETRIES - 1:
                delay = RETRY_DELAYS[attempt]
                logger.warning(
                    "Redis ping failed (attempt %d/%d), retrying in %ds: %s",
                    attempt + 1,
                    MAX_RETRIES,
                    delay,
                    e,
                )
                await asyncio.sleep(delay)

    raise RuntimeError(f"Redis connection failed after {MAX_RETRIES} attempts: {last_error}")


async def close_redis() -> None:
    """Close Redis connection pool."""
    global _redis_pool, _redis_client
    if _redis_client is not None:
        await _redis_client.close()
        _redis_client = None
    if _redis_pool is not None:
        await _redis_pool.disconnect()
        _redis_pool = None


def get_redis() -> Redis:
    """Get Redis client instance.

    Must call init_redis() during application startup before using this.

    Returns:
        Redis client instance

    Raises:
        RuntimeError: If Redis is not initialized
    """
    if _redis_client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis_client


class SettingsKeys:
    """Names of the values held in the settings store."""

    COINS = "coins"
    OWNED_ITEMS = "owned_items"

    # Timer run state
    SESSION_PHASE = "session-phase"
    TIMER_START = "timer-start"
    TIMER_DURATION = "timer-duration"
    TIMER_TASK_ID = "timer-task-id"
    DISTRACTION_TIME = "distraction-time"

    # Failing grace window
    FAILING_INSTANT = "failing-instant"
    FAILING_SESSION_START = "failing-session-start"

    # Set when a failed session must clear the build
    BUILD_CLEAR_PENDING = "build-clear-pending"

    # Slack
    SLACK_SHOULD_MESSAGE = "slack-should-message"
    SLACK_API_KEY = "slack-api-key"
    SLACK_CHANNEL = "slack-channel"
    SLACK_SHOULD_STATUS = "slack-should-status"
    SLACK_STATUS_API_KEY = "slack-status-api-key"
    SLACK_STATUS_EMOJI = "slack-status-emoji"

    # Reminders sync
    REMINDERS_SYNC_ENABLED = "reminders-sync-enabled"
    REMINDER_LIST_ID = "reminder-list-id"

    RUN_STATE = (
        SESSION_PHASE,
        TIMER_START,
        TIMER_DURATION,
        TIMER_TASK_ID,
        DISTRACTION_TIME,
        FAILING_INSTANT,
        FAILING_SESSION_START,
    )

    @staticmethod
    def storage_key(name: str) -> str:
        """Redis key holding a settings value."""
        return f"settings:{name}"
