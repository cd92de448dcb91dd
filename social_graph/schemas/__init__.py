"""Convenience exports for schema layer."""
from .follow import (
    FollowActionResponse,
    FollowEdgeResponse,
    FollowRequestResponse,
    FollowRequestsResponse,
    RelationshipResponse,
)
from .users import (
    FollowersResponse,
    FollowingResponse,
    SearchUsersResponse,
    UserProfile,
    UserProfileResponse,
    UserSummary,
)

__all__ = [
    "FollowActionResponse",
    "FollowEdgeResponse",
    "FollowRequestResponse",
    "FollowRequestsResponse",
    "RelationshipResponse",
    "FollowersResponse",
    "FollowingResponse",
    "SearchUsersResponse",
    "UserProfile",
    "UserProfileResponse",
    "UserSummary",
]
