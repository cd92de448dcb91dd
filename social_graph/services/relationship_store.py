"""Persistence primitives for follow edges and follow requests.

This module is the only place that writes to the ``follows`` and
``follow_requests`` tables. Writes are conditional on the current row state
(insert guarded by unique indexes, updates and deletes filtered on
``status = 'PENDING'``) so that two writers racing on the same ordered pair
cannot both succeed. Functions here only flush; the calling engine owns the
transaction and decides whether to commit or roll back.
"""
from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session, selectinload

from ..models import Follow, FollowRequest, FollowRequestStatus, User
from ..models.base import utc_now


def get_follow(db: Session, *, follower_id: UUID, following_id: UUID) -> Follow | None:
    stmt = select(Follow).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
    return db.scalar(stmt)


def get_pending_request(db: Session, *, sender_id: UUID, receiver_id: UUID) -> FollowRequest | None:
    stmt = select(FollowRequest).where(
        FollowRequest.sender_id == sender_id,
        FollowRequest.receiver_id == receiver_id,
        FollowRequest.status == FollowRequestStatus.PENDING.value,
    )
    return db.scalar(stmt)


def get_request(db: Session, request_id: UUID) -> FollowRequest | None:
    stmt = (
        select(FollowRequest)
        .where(FollowRequest.id == request_id)
        .options(selectinload(FollowRequest.sender), selectinload(FollowRequest.receiver))
        .execution_options(populate_existing=True)
    )
    return db.scalar(stmt)


def insert_follow(db: Session, *, follower_id: UUID, following_id: UUID) -> Follow:
    """Stage a new edge; raises ``IntegrityError`` when the pair already has one."""

    record = Follow(follower_id=follower_id, following_id=following_id, created_at=utc_now())
    db.add(record)
    db.flush()
    return record


def insert_pending_request(db: Session, *, sender_id: UUID, receiver_id: UUID) -> FollowRequest:
    """Stage a PENDING request; raises ``IntegrityError`` when one is already live."""

    timestamp = utc_now()
    record = FollowRequest(
        sender_id=sender_id,
        receiver_id=receiver_id,
        status=FollowRequestStatus.PENDING.value,
        created_at=timestamp,
        updated_at=timestamp,
    )
    db.add(record)
    db.flush()
    return record


def delete_follow(db: Session, *, follower_id: UUID, following_id: UUID) -> bool:
    stmt = delete(Follow).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
    result = db.execute(stmt)
    return result.rowcount > 0


def delete_pending_request(db: Session, *, sender_id: UUID, receiver_id: UUID) -> bool:
    stmt = delete(FollowRequest).where(
        FollowRequest.sender_id == sender_id,
        FollowRequest.receiver_id == receiver_id,
        FollowRequest.status == FollowRequestStatus.PENDING.value,
    )
    result = db.execute(stmt)
    return result.rowcount > 0


def settle_request(db: Session, *, request_id: UUID, outcome: FollowRequestStatus) -> bool:
    """Move a request out of PENDING; returns False when another writer got there first."""

    if outcome is FollowRequestStatus.PENDING:
        raise ValueError("outcome must be a terminal status")
    stmt = (
        update(FollowRequest)
        .where(FollowRequest.id == request_id, FollowRequest.status == FollowRequestStatus.PENDING.value)
        .values(status=outcome.value, updated_at=utc_now())
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    return result.rowcount == 1


def settle_pending_pair(db: Session, *, sender_id: UUID, receiver_id: UUID, outcome: FollowRequestStatus) -> int:
    """Retire any live request between the pair, used when an edge appears directly."""

    stmt = (
        update(FollowRequest)
        .where(
            FollowRequest.sender_id == sender_id,
            FollowRequest.receiver_id == receiver_id,
            FollowRequest.status == FollowRequestStatus.PENDING.value,
        )
        .values(status=outcome.value, updated_at=utc_now())
        .execution_options(synchronize_session=False)
    )
    return db.execute(stmt).rowcount


def list_followers(db: Session, *, user_id: UUID, limit: int, offset: int) -> list[User]:
    stmt = (
        select(User)
        .join(Follow, Follow.follower_id == User.id)
        .where(Follow.following_id == user_id)
        .order_by(Follow.created_at.desc(), Follow.id.asc())
        .limit(limit)
        .offset(offset)
    )
    return list(db.scalars(stmt))


def list_following(db: Session, *, user_id: UUID, limit: int, offset: int) -> list[User]:
    stmt = (
        select(User)
        .join(Follow, Follow.following_id == User.id)
        .where(Follow.follower_id == user_id)
        .order_by(Follow.created_at.desc(), Follow.id.asc())
        .limit(limit)
        .offset(offset)
    )
    return list(db.scalars(stmt))


def list_pending_requests(
    db: Session,
    *,
    sender_id: UUID | None = None,
    receiver_id: UUID | None = None,
    limit: int,
    offset: int,
) -> list[FollowRequest]:
    stmt = select(FollowRequest).where(FollowRequest.status == FollowRequestStatus.PENDING.value)
    if sender_id is not None:
        stmt = stmt.where(FollowRequest.sender_id == sender_id)
    if receiver_id is not None:
        stmt = stmt.where(FollowRequest.receiver_id == receiver_id)
    stmt = (
        stmt.options(selectinload(FollowRequest.sender), selectinload(FollowRequest.receiver))
        .order_by(FollowRequest.created_at.desc(), FollowRequest.id.asc())
        .limit(limit)
        .offset(offset)
    )
    return list(db.scalars(stmt))


__all__ = [
    "get_follow",
    "get_pending_request",
    "get_request",
    "insert_follow",
    "insert_pending_request",
    "delete_follow",
    "delete_pending_request",
    "settle_request",
    "settle_pending_pair",
    "list_followers",
    "list_following",
    "list_pending_requests",
]
