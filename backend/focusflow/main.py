import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from focusflow.core.config import get_settings
from focusflow.core.exceptions import register_exception_handlers
from focusflow.core.logging_config import setup_logging
from focusflow.core.middleware import CorrelationIDMiddleware
from focusflow.core.redis import close_redis, init_redis
from focusflow.routers import (
    health,
    reminders,
    sessions,
    store,
    tasks,
)
from focusflow.routers import settings as settings_router
from focusflow.services.owned_item_service import get_owned_item_service
from focusflow.services.session_engine import get_session_engine
from focusflow.services.session_ticker import SessionTicker
from focusflow.services.settings_store import get_settings_store

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()
    logger.info("Starting %s...", settings.app_name)
    await init_redis()
    logger.info("Redis connection initialized")

    await get_owned_item_service().load()
    watcher = asyncio.create_task(get_settings_store().watch_forever())

    engine = get_session_engine()
    ticker = SessionTicker(engine, interval=settings.tick_interval_seconds)
    ticker.start()
    app.state.ticker = ticker

    yield

    logger.info("Shutting down %s...", settings.app_name)
    await ticker.stop()
    watcher.cancel()
    try:
        await watcher
    except asyncio.CancelledError:
        pass
    await engine.notifier.dispatcher.drain()
    await close_redis()
    logger.info("Redis connection closed")


app = FastAPI(
    title=settings.app_name,
    description="Focus timer, coin ledger and store API for FocusFlow",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Correlation IDs for request logging
app.add_middleware(CorrelationIDMiddleware)

# Global exception handlers (domain exceptions → HTTP responses)
register_exception_handlers(app)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(sessions.router, prefix=f"{settings.api_prefix}/sessions", tags=["Sessions"])
app.include_router(store.router, prefix=f"{settings.api_prefix}/store", tags=["Store"])
app.include_router(tasks.router, prefix=f"{settings.api_prefix}/tasks", tags=["Tasks"])
app.include_router(
    reminders.router, prefix=f"{settings.api_prefix}/reminders", tags=["Reminders"]
)
app.include_router(
    settings_router.router, prefix=f"{settings.api_prefix}/settings", tags=["Settings"]
)
