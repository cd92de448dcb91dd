"""Follower and following counts derived from the live edge set.

Counts are aggregated on read inside the caller's session rather than kept in
a counter column, so a count can never disagree with the rows in ``follows``.
"""
from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models import Follow, FollowRequest, FollowRequestStatus
from .user_directory import get_user
from .visibility_service import resolve_relationship


@dataclass(slots=True)
class FollowStats:
    user_id: UUID
    followers_count: int
    following_count: int
    is_following: bool
    request_status: str | None = None


def followers_count(db: Session, user_id: UUID) -> int:
    stmt = select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
    return int(db.scalar(stmt) or 0)


def following_count(db: Session, user_id: UUID) -> int:
    stmt = select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
    return int(db.scalar(stmt) or 0)


def pending_request_count(db: Session, *, sender_id: UUID | None = None, receiver_id: UUID | None = None) -> int:
    stmt = (
        select(func.count())
        .select_from(FollowRequest)
        .where(FollowRequest.status == FollowRequestStatus.PENDING.value)
    )
    if sender_id is not None:
        stmt = stmt.where(FollowRequest.sender_id == sender_id)
    if receiver_id is not None:
        stmt = stmt.where(FollowRequest.receiver_id == receiver_id)
    return int(db.scalar(stmt) or 0)


def get_follow_stats(db: Session, *, user_id: UUID, viewer_id: UUID | None = None) -> FollowStats:
    get_user(db, user_id)

    is_following = False
    request_status: str | None = None
    if viewer_id is not None:
        relationship = resolve_relationship(db, viewer_id=viewer_id, target_id=user_id)
        is_following = relationship.is_following
        request_status = relationship.request_status

    return FollowStats(
        user_id=user_id,
        followers_count=followers_count(db, user_id),
        following_count=following_count(db, user_id),
        is_following=is_following,
        request_status=request_status,
    )


__all__ = [
    "FollowStats",
    "followers_count",
    "following_count",
    "pending_request_count",
    "get_follow_stats",
]
