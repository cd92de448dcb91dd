"""Domain error taxonomy for the social graph service.

Every error raised by the engine is a caller-input or permission problem, so
none of them is retryable. The FastAPI app renders them as
``{"error": message, "code": code}`` with the class' ``status_code``.
"""
from __future__ import annotations

from fastapi import status


class SocialGraphError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"
    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, str]:
        return {"error": self.message, "code": self.code}


class ValidationError(SocialGraphError):
    """Raised for malformed input such as a self-follow."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class ForbiddenError(SocialGraphError):
    """Raised when the caller is not a party allowed to act on a record."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class NotFoundError(SocialGraphError):
    """Raised for unknown user or follow request ids."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class ConflictError(SocialGraphError):
    """Raised when a request was already settled in the opposite direction."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class InvalidStateError(SocialGraphError):
    """Raised when the pair is not in the state an operation requires."""

    status_code = status.HTTP_409_CONFLICT
    code = "invalid_state"


__all__ = [
    "SocialGraphError",
    "ValidationError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "InvalidStateError",
]
