"""Loading of the bearer-token signing key shared with the identity service."""
from __future__ import annotations

import os
from typing import Final

__all__ = ["MissingSecretError", "require_secret"]

# Keys shorter than this are treated as unset.
MIN_SECRET_LENGTH: Final[int] = 12

_PLACEHOLDER_VALUES: Final[frozenset[str]] = frozenset(
    {"changeme", "change-me", "placeholder", "secret", "your-secret-here"}
)


class MissingSecretError(RuntimeError):
    """The signing key is unset, a placeholder, or too short."""


def _usable(value: str) -> bool:
    return len(value) >= MIN_SECRET_LENGTH and value.lower() not in _PLACEHOLDER_VALUES


def require_secret(name: str) -> str:
    """Return the trimmed value of ``name``; the error names the variable, never its value."""

    value = (os.getenv(name) or "").strip()
    if not _usable(value):
        raise MissingSecretError(
            f"{name} must hold the identity service signing key (at least {MIN_SECRET_LENGTH} characters)"
        )
    return value
