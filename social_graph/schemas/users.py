"""Schemas for user listings and profiles."""
from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from .base import CamelModel


class UserSummary(CamelModel):
    id: UUID
    username: str
    full_name: str
    bio: str | None = None
    profile_picture_url: str | None = None
    instagram_username: str | None = None
    is_private: bool
    created_at: datetime
    is_following: bool = False
    follow_request_status: Literal["PENDING"] | None = None


class UserProfile(UserSummary):
    followers_count: int
    following_count: int


class UserProfileResponse(CamelModel):
    user: UserProfile


class FollowersResponse(CamelModel):
    followers: list[UserSummary]
    total: int


class FollowingResponse(CamelModel):
    following: list[UserSummary]
    total: int


class SearchUsersResponse(CamelModel):
    users: list[UserSummary]
    total: int


__all__ = [
    "UserSummary",
    "UserProfile",
    "UserProfileResponse",
    "FollowersResponse",
    "FollowingResponse",
    "SearchUsersResponse",
]
