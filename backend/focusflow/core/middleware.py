"""Request correlation for FocusFlow's HTTP surface.

Every request runs under one correlation ID, so the session transitions and
purchases it logs can be grouped.
Lines from the session ticker run outside any request and are logged with "-".
"""

import uuid
from contextvars import ContextVar

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
_FALLBACK_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# Read by CorrelationIDFilter; empty outside a request.
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    return correlation_id_var.get()


def _incoming_id(request: Request) -> str:
    for header in _FALLBACK_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return str(uuid.uuid4())


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Tags each request with a caller-supplied or fresh correlation ID.

    A client may pass its own ID as ``X-Request-ID`` (``X-Correlation-ID`` is
    accepted too). The ID is echoed back as ``X-Request-ID`` and exposed to
    handlers as ``request.state.correlation_id``.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = _incoming_id(request)
        request.state.correlation_id = correlation_id
        token = correlation_id_var.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = correlation_id
        return response
