"""Pydantic models for the FocusFlow API."""

from focusflow.models.session import (
    FocusSession,
    FocusSessionCreate,
    FocusSessionNotFoundError,
    InvalidSessionDurationError,
    SessionAlreadyActiveError,
    SessionEngineError,
    SessionOutcome,
    SessionPhase,
    SessionRunState,
    SessionStatus,
    SessionTransition,
)
from focusflow.models.store import (
    STORE_CATALOG,
    InsufficientCoinsError,
    ItemNotFoundError,
    OwnedItem,
    PurchaseLimitError,
    StoreItem,
    StoreServiceError,
)

__all__ = [
    # Session models
    "FocusSession",
    "FocusSessionCreate",
    "FocusSessionNotFoundError",
    "InvalidSessionDurationError",
    "SessionAlreadyActiveError",
    "SessionEngineError",
    "SessionOutcome",
    "SessionPhase",
    "SessionRunState",
    "SessionStatus",
    "SessionTransition",
    # Store models
    "STORE_CATALOG",
    "InsufficientCoinsError",
    "ItemNotFoundError",
    "OwnedItem",
    "PurchaseLimitError",
    "StoreItem",
    "StoreServiceError",
]
