"""Convenience exports for service layer."""
from .auth_service import create_access_token, decode_access_token, get_current_user
from .count_service import FollowStats, followers_count, following_count, get_follow_stats
from .follow_service import (
    FollowOutcome,
    FollowStatus,
    Page,
    accept_follow_request,
    cancel_follow_request,
    cancel_follow_request_by_id,
    follow_user,
    list_followers,
    list_following,
    list_pending_requests,
    list_sent_requests,
    reject_follow_request,
    remove_follower,
    unfollow_user,
)
from .user_directory import get_user, get_user_by_username, search_users
from .visibility_service import RelationshipState, RelationshipStatus, resolve_many, resolve_relationship

__all__ = [
    "create_access_token",
    "decode_access_token",
    "get_current_user",
    "FollowStats",
    "followers_count",
    "following_count",
    "get_follow_stats",
    "FollowOutcome",
    "FollowStatus",
    "Page",
    "follow_user",
    "unfollow_user",
    "remove_follower",
    "cancel_follow_request",
    "cancel_follow_request_by_id",
    "accept_follow_request",
    "reject_follow_request",
    "list_followers",
    "list_following",
    "list_pending_requests",
    "list_sent_requests",
    "get_user",
    "get_user_by_username",
    "search_users",
    "RelationshipState",
    "RelationshipStatus",
    "resolve_relationship",
    "resolve_many",
]
