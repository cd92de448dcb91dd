"""Schemas supporting follower and follow-request APIs."""
from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from .base import CamelModel
from .users import UserSummary


class FollowEdgeResponse(CamelModel):
    id: UUID
    follower_id: UUID
    following_id: UUID
    created_at: datetime


class FollowRequestResponse(CamelModel):
    id: UUID
    sender_id: UUID
    receiver_id: UUID
    status: Literal["PENDING", "ACCEPTED", "REJECTED"]
    created_at: datetime
    updated_at: datetime
    sender: UserSummary | None = None
    receiver: UserSummary | None = None


class FollowActionResponse(CamelModel):
    message: str
    status: Literal["followed", "requested", "already_following", "already_pending"]
    follow: FollowEdgeResponse | None = None
    request: FollowRequestResponse | None = None


class FollowRequestsResponse(CamelModel):
    requests: list[FollowRequestResponse]
    total: int


class RelationshipResponse(CamelModel):
    is_following: bool
    request_status: Literal["PENDING"] | None = None
    target_is_private: bool
    state: Literal["NONE", "PENDING_REQUEST", "FOLLOWING"]


__all__ = [
    "FollowEdgeResponse",
    "FollowRequestResponse",
    "FollowActionResponse",
    "FollowRequestsResponse",
    "RelationshipResponse",
]
