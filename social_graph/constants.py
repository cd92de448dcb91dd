"""Project-wide constant values."""
from __future__ import annotations

FOLLOWED_MESSAGE = "User followed successfully"
REQUESTED_MESSAGE = "Follow request sent"
ALREADY_FOLLOWING_MESSAGE = "You are already following this user"  # informational, client refreshes state
ALREADY_PENDING_MESSAGE = "Follow request already pending"

__all__ = [
    "FOLLOWED_MESSAGE",
    "REQUESTED_MESSAGE",
    "ALREADY_FOLLOWING_MESSAGE",
    "ALREADY_PENDING_MESSAGE",
]
