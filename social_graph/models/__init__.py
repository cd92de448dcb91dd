"""Convenience exports for ORM models."""
from .follow import Follow
from .follow_request import FollowRequest, FollowRequestStatus
from .user import User

__all__ = [
    "Follow",
    "FollowRequest",
    "FollowRequestStatus",
    "User",
]
