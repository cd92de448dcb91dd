"""Viewer-relative relationship lookups."""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Follow, FollowRequest, FollowRequestStatus, User
from .relationship_store import get_follow, get_pending_request
from .user_directory import get_user


class RelationshipState(StrEnum):
    NONE = "NONE"
    PENDING_REQUEST = "PENDING_REQUEST"
    FOLLOWING = "FOLLOWING"


@dataclass(frozen=True, slots=True)
class RelationshipStatus:
    is_following: bool
    request_status: str | None
    target_is_private: bool

    @property
    def state(self) -> RelationshipState:
        if self.is_following:
            return RelationshipState.FOLLOWING
        if self.request_status == FollowRequestStatus.PENDING:
            return RelationshipState.PENDING_REQUEST
        return RelationshipState.NONE


def resolve_relationship(db: Session, *, viewer_id: UUID, target_id: UUID) -> RelationshipStatus:
    """Describe what ``viewer_id`` currently has with ``target_id``.

    Both users must exist. Viewing oneself is allowed and never reports a
    follow or a pending request.
    """

    get_user(db, viewer_id)
    target = get_user(db, target_id)
    target_is_private = bool(target.is_private)

    if viewer_id == target_id:
        return RelationshipStatus(is_following=False, request_status=None, target_is_private=target_is_private)

    if get_follow(db, follower_id=viewer_id, following_id=target_id) is not None:
        return RelationshipStatus(is_following=True, request_status=None, target_is_private=target_is_private)

    pending = get_pending_request(db, sender_id=viewer_id, receiver_id=target_id)
    return RelationshipStatus(
        is_following=False,
        request_status=FollowRequestStatus.PENDING.value if pending is not None else None,
        target_is_private=target_is_private,
    )


def resolve_many(db: Session, *, viewer_id: UUID, targets: Iterable[User]) -> dict[UUID, RelationshipStatus]:
    """Batch variant of :func:`resolve_relationship` for list payloads."""

    users = list(targets)
    target_ids = [user.id for user in users if user.id != viewer_id]

    followed: set[UUID] = set()
    pending: set[UUID] = set()
    if target_ids:
        followed = set(
            db.scalars(
                select(Follow.following_id).where(
                    Follow.follower_id == viewer_id,
                    Follow.following_id.in_(target_ids),
                )
            )
        )
        pending = set(
            db.scalars(
                select(FollowRequest.receiver_id).where(
                    FollowRequest.sender_id == viewer_id,
                    FollowRequest.receiver_id.in_(target_ids),
                    FollowRequest.status == FollowRequestStatus.PENDING.value,
                )
            )
        )

    statuses: dict[UUID, RelationshipStatus] = {}
    for user in users:
        is_following = user.id in followed
        statuses[user.id] = RelationshipStatus(
            is_following=is_following,
            request_status=FollowRequestStatus.PENDING.value if (user.id in pending and not is_following) else None,
            target_is_private=bool(user.is_private),
        )
    return statuses


__all__ = ["RelationshipState", "RelationshipStatus", "resolve_relationship", "resolve_many"]
