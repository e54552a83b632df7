"""
Global exception handlers for FastAPI.

Maps domain exceptions to HTTP responses, eliminating try/except
boilerplate from routers. Register with register_exception_handlers(app).
"""

import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def error_response(status_code: int, detail: str, code: Optional[str] = None) -> JSONResponse:
    """Build a standardized error JSON response."""
    content: dict = {"detail": detail}
    if code:
        content["code"] = code
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all domain exception handlers on the FastAPI app."""
    from focusflow.models.session import (
        FocusSessionNotFoundError,
        InvalidSessionDurationError,
        SessionAlreadyActiveError,
    )
    from focusflow.models.settings import SlackAPIError, SlackNotConfiguredError
    from focusflow.models.store import (
        InsufficientCoinsError,
        ItemNotFoundError,
        PurchaseLimitError,
    )
    from focusflow.models.task import TaskNotFoundError

    # --- Session handlers ---

    @app.exception_handler(SessionAlreadyActiveError)
    async def _session_active(request: Request, exc: SessionAlreadyActiveError) -> JSONResponse:
        return error_response(
            409,
            f"A focus session is already {exc.phase.value}.",
            "SESSION_ALREADY_ACTIVE",
        )

    @app.exception_handler(InvalidSessionDurationError)
    async def _invalid_duration(
        request: Request, exc: InvalidSessionDurationError
    ) -> JSONResponse:
        return error_response(422, str(exc), "INVALID_SESSION_DURATION")

    @app.exception_handler(FocusSessionNotFoundError)
    async def _session_not_found(request: Request, exc: FocusSessionNotFoundError) -> JSONResponse:
        return error_response(404, "Focus session not found.", "SESSION_NOT_FOUND")

    # --- Store handlers ---

    @app.exception_handler(ItemNotFoundError)
    async def _item_not_found(request: Request, exc: ItemNotFoundError) -> JSONResponse:
        return error_response(404, "Item not found.", "ITEM_NOT_FOUND")

    @app.exception_handler(InsufficientCoinsError)
    async def _insufficient_coins(request: Request, exc: InsufficientCoinsError) -> JSONResponse:
        return error_response(
            402,
            f"Insufficient coins. Available: {exc.available}, Required: {exc.required}",
            "INSUFFICIENT_COINS",
        )

    @app.exception_handler(PurchaseLimitError)
    async def _purchase_limit(request: Request, exc: PurchaseLimitError) -> JSONResponse:
        return error_response(409, str(exc), "PURCHASE_LIMIT")

    # --- Task handlers ---

    @app.exception_handler(TaskNotFoundError)
    async def _task_not_found(request: Request, exc: TaskNotFoundError) -> JSONResponse:
        return error_response(404, "Task not found.", "TASK_NOT_FOUND")

    # --- Slack handlers ---

    @app.exception_handler(SlackNotConfiguredError)
    async def _slack_not_configured(
        request: Request, exc: SlackNotConfiguredError
    ) -> JSONResponse:
        return error_response(400, str(exc), "SLACK_NOT_CONFIGURED")

    @app.exception_handler(SlackAPIError)
    async def _slack_api_error(request: Request, exc: SlackAPIError) -> JSONResponse:
        logger.warning("Slack API error: %s", exc.error)
        return error_response(502, str(exc), "SLACK_API_ERROR")

    @app.exception_handler(httpx.HTTPError)
    async def _upstream_http_error(request: Request, exc: httpx.HTTPError) -> JSONResponse:
        logger.error("Upstream HTTP error: %s", exc)
        return error_response(502, "Upstream service error.", "UPSTREAM_ERROR")

    # --- Catch-all ---

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return error_response(500, "Internal server error.", "INTERNAL_ERROR")
