from __future__ import annotations

from typing import Any, Dict, Optional


class MindGraphError(Exception):
    """Base class for errors raised by the mind-map core."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(MindGraphError):
    """Raised when an operation targets an entity that does not exist."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            f"{entity} not found: {entity_id}",
            {"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


class ValidationFailure(MindGraphError):
    """Raised when a required field is missing or malformed."""


class RateLimitExceeded(MindGraphError):
    """Raised when a gated action is denied by the rate limiter."""

    def __init__(self, action: str, reset_at: int):
        super().__init__(
            "Rate limit exceeded",
            {"action": action, "reset_at": reset_at},
        )
        self.action = action
        self.reset_at = reset_at


__all__ = [
    "MindGraphError",
    "NotFoundError",
    "ValidationFailure",
    "RateLimitExceeded",
]
