"""Business logic for follow relationships and follow requests.

Each public function runs against the supplied session and either commits a
single state transition for the ordered (actor, target) pair or leaves the
store untouched. A follow may additionally retire a request that a concurrent
writer committed beside the new edge. Races between writers on the same pair are
settled by the conditional writes in :mod:`relationship_store`; the loser
re-reads the committed state instead of surfacing the race as an error.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, NoReturn, TypeVar, cast
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..constants import (
    ALREADY_FOLLOWING_MESSAGE,
    ALREADY_PENDING_MESSAGE,
    FOLLOWED_MESSAGE,
    REQUESTED_MESSAGE,
)
from ..errors import ConflictError, ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from ..models import Follow, FollowRequest, FollowRequestStatus, User
from . import relationship_store as store
from .count_service import followers_count, following_count, pending_request_count
from .user_directory import get_user

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Upper bound on re-reads after losing a race on one request.
_MAX_SETTLE_ATTEMPTS = 3


class FollowStatus(StrEnum):
    FOLLOWED = "followed"
    REQUESTED = "requested"
    ALREADY_FOLLOWING = "already_following"
    ALREADY_PENDING = "already_pending"


_MESSAGES = {
    FollowStatus.FOLLOWED: FOLLOWED_MESSAGE,
    FollowStatus.REQUESTED: REQUESTED_MESSAGE,
    FollowStatus.ALREADY_FOLLOWING: ALREADY_FOLLOWING_MESSAGE,
    FollowStatus.ALREADY_PENDING: ALREADY_PENDING_MESSAGE,
}


@dataclass(slots=True)
class FollowOutcome:
    status: FollowStatus
    follow: Follow | None = None
    request: FollowRequest | None = None

    @property
    def created(self) -> bool:
        return self.status in (FollowStatus.FOLLOWED, FollowStatus.REQUESTED)

    @property
    def message(self) -> str:
        return _MESSAGES[self.status]


@dataclass(slots=True)
class Page(Generic[T]):
    items: list[T]
    total: int


def _actor_id(actor: User) -> UUID:
    return cast(UUID, actor.id)


def _database_failure(db: Session, exc: SQLAlchemyError, detail: str) -> NoReturn:
    db.rollback()
    logger.exception(detail)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail) from exc


def _settled_outcome(db: Session, actor_id: UUID, target_id: UUID) -> FollowOutcome | None:
    follow = store.get_follow(db, follower_id=actor_id, following_id=target_id)
    if follow is not None:
        return FollowOutcome(FollowStatus.ALREADY_FOLLOWING, follow=follow)
    pending = store.get_pending_request(db, sender_id=actor_id, receiver_id=target_id)
    if pending is not None:
        return FollowOutcome(FollowStatus.ALREADY_PENDING, request=pending)
    return None


def follow_user(db: Session, *, actor: User, target_id: UUID) -> FollowOutcome:
    """Follow ``target_id`` directly, or send a request when the account is private.

    Following again while already following or while a request is pending is
    a no-op reporting the existing record.
    """

    actor_id = _actor_id(actor)
    if actor_id == target_id:
        raise ValidationError("Cannot follow yourself")

    target = get_user(db, target_id)
    target_is_private = bool(target.is_private)

    for attempt in range(_MAX_SETTLE_ATTEMPTS):
        settled = _settled_outcome(db, actor_id, target_id)
        if settled is not None:
            if attempt:
                logger.debug("Concurrent follow of %s by %s collapsed into %s", target_id, actor_id, settled.status)
            else:
                logger.debug("Follow of %s by %s is a no-op (%s)", target_id, actor_id, settled.status)
            return settled

        try:
            outcome = _stage_follow(db, actor_id, target_id, private=target_is_private)
            if outcome is None:
                db.rollback()
                continue
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            logger.debug("Follow of %s by %s lost a write race: %s", target_id, actor_id, exc.orig)
            continue
        except SQLAlchemyError as exc:
            _database_failure(db, exc, "Unable to follow user")

        if outcome.status is FollowStatus.FOLLOWED:
            logger.info("User %s followed %s", actor_id, target_id)
        else:
            logger.info("User %s requested to follow %s", actor_id, target_id)
        return _reconcile_pair(db, actor_id, target_id, outcome)

    logger.error("Relationship %s -> %s kept changing while following", actor_id, target_id)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to follow user")


def _stage_follow(db: Session, actor_id: UUID, target_id: UUID, *, private: bool) -> FollowOutcome | None:
    """Stage the edge or the request for the pair; ``None`` when an edge is already there."""

    if private:
        request = store.insert_pending_request(db, sender_id=actor_id, receiver_id=target_id)
        # An accept committed since the first read leaves its edge visible here.
        if store.get_follow(db, follower_id=actor_id, following_id=target_id) is not None:
            return None
        return FollowOutcome(FollowStatus.REQUESTED, request=request)

    follow = store.insert_follow(db, follower_id=actor_id, following_id=target_id)
    store.settle_pending_pair(db, sender_id=actor_id, receiver_id=target_id, outcome=FollowRequestStatus.ACCEPTED)
    return FollowOutcome(FollowStatus.FOLLOWED, follow=follow)


def _reconcile_pair(db: Session, actor_id: UUID, target_id: UUID, outcome: FollowOutcome) -> FollowOutcome:
    """Retire a request committed beside an edge by a writer that saw neither.

    A direct follow and a request for the same pair (the target changed its
    privacy in between) touch different rows, so neither transaction blocks
    the other. Each writer re-reads the pair after its own commit, and at least
    one of them observes both rows.
    """

    try:
        follow = store.get_follow(db, follower_id=actor_id, following_id=target_id)
        if follow is None:
            return outcome
        retired = store.settle_pending_pair(
            db, sender_id=actor_id, receiver_id=target_id, outcome=FollowRequestStatus.ACCEPTED
        )
        db.commit()
    except SQLAlchemyError as exc:
        _database_failure(db, exc, "Unable to follow user")

    if retired:
        logger.info("Retired follow request %s -> %s behind an existing edge", actor_id, target_id)
    if outcome.status is FollowStatus.REQUESTED:
        return FollowOutcome(FollowStatus.ALREADY_FOLLOWING, follow=follow)
    return outcome


def unfollow_user(db: Session, *, actor: User, target_id: UUID) -> None:
    actor_id = _actor_id(actor)
    if actor_id == target_id:
        raise ValidationError("Cannot unfollow yourself")
    get_user(db, target_id)

    try:
        removed = store.delete_follow(db, follower_id=actor_id, following_id=target_id)
        if not removed:
            db.rollback()
            raise InvalidStateError("You are not following this user")
        db.commit()
    except SQLAlchemyError as exc:
        _database_failure(db, exc, "Unable to unfollow user")
    logger.info("User %s unfollowed %s", actor_id, target_id)


def remove_follower(db: Session, *, actor: User, follower_id: UUID) -> None:
    """Drop ``follower_id``'s edge onto the acting user."""

    actor_id = _actor_id(actor)
    if actor_id == follower_id:
        raise ValidationError("Cannot remove yourself as a follower")
    get_user(db, follower_id)

    try:
        removed = store.delete_follow(db, follower_id=follower_id, following_id=actor_id)
        if not removed:
            db.rollback()
            raise InvalidStateError("This user does not follow you")
        db.commit()
    except SQLAlchemyError as exc:
        _database_failure(db, exc, "Unable to remove follower")
    logger.info("User %s removed follower %s", actor_id, follower_id)


def cancel_follow_request(db: Session, *, actor: User, target_id: UUID) -> None:
    actor_id = _actor_id(actor)
    if actor_id == target_id:
        raise ValidationError("Cannot cancel a follow request to yourself")
    get_user(db, target_id)
    _delete_pending(db, sender_id=actor_id, receiver_id=target_id)


def cancel_follow_request_by_id(db: Session, *, actor: User, request_id: UUID) -> None:
    request = store.get_request(db, request_id)
    if request is None:
        raise NotFoundError("Follow request not found")
    if request.sender_id != _actor_id(actor):
        raise ForbiddenError("Only the sender can cancel this follow request")
    if not request.is_pending:
        raise InvalidStateError("Follow request is no longer pending")
    _delete_pending(db, sender_id=cast(UUID, request.sender_id), receiver_id=cast(UUID, request.receiver_id))


def _delete_pending(db: Session, *, sender_id: UUID, receiver_id: UUID) -> None:
    try:
        removed = store.delete_pending_request(db, sender_id=sender_id, receiver_id=receiver_id)
        if not removed:
            db.rollback()
            raise InvalidStateError("No pending follow request for this user")
        db.commit()
    except SQLAlchemyError as exc:
        _database_failure(db, exc, "Unable to cancel follow request")
    logger.info("User %s cancelled follow request to %s", sender_id, receiver_id)


def _request_for_receiver(db: Session, *, actor: User, request_id: UUID) -> FollowRequest:
    request = store.get_request(db, request_id)
    if request is None:
        raise NotFoundError("Follow request not found")
    if request.receiver_id != _actor_id(actor):
        raise ForbiddenError("Only the receiver can respond to this follow request")
    return request


def accept_follow_request(db: Session, *, actor: User, request_id: UUID) -> FollowRequest:
    """Accept a pending request, creating the sender's follow edge.

    Accepting a request that is already accepted returns it unchanged.
    """

    for _ in range(_MAX_SETTLE_ATTEMPTS):
        request = _request_for_receiver(db, actor=actor, request_id=request_id)
        if request.status == FollowRequestStatus.ACCEPTED:
            return request
        if request.status == FollowRequestStatus.REJECTED:
            raise ConflictError("Follow request was already rejected")

        sender_id = cast(UUID, request.sender_id)
        receiver_id = cast(UUID, request.receiver_id)
        try:
            if not store.settle_request(db, request_id=request_id, outcome=FollowRequestStatus.ACCEPTED):
                db.rollback()
                continue
            if store.get_follow(db, follower_id=sender_id, following_id=receiver_id) is None:
                store.insert_follow(db, follower_id=sender_id, following_id=receiver_id)
            db.commit()
        except IntegrityError:
            # The edge appeared concurrently; retry so the status change lands with it.
            db.rollback()
            continue
        except SQLAlchemyError as exc:
            _database_failure(db, exc, "Unable to accept follow request")

        logger.info("User %s accepted follow request %s from %s", receiver_id, request_id, sender_id)
        return _request_for_receiver(db, actor=actor, request_id=request_id)

    logger.error("Follow request %s kept changing while being accepted", request_id)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to accept follow request")


def reject_follow_request(db: Session, *, actor: User, request_id: UUID) -> FollowRequest:
    """Reject a pending request; the record is kept but never blocks a new one."""

    for _ in range(_MAX_SETTLE_ATTEMPTS):
        request = _request_for_receiver(db, actor=actor, request_id=request_id)
        if request.status == FollowRequestStatus.REJECTED:
            return request
        if request.status == FollowRequestStatus.ACCEPTED:
            raise ConflictError("Follow request was already accepted")

        try:
            if not store.settle_request(db, request_id=request_id, outcome=FollowRequestStatus.REJECTED):
                db.rollback()
                continue
            db.commit()
        except SQLAlchemyError as exc:
            _database_failure(db, exc, "Unable to reject follow request")

        logger.info("User %s rejected follow request %s from %s", request.receiver_id, request_id, request.sender_id)
        return _request_for_receiver(db, actor=actor, request_id=request_id)

    logger.error("Follow request %s kept changing while being rejected", request_id)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to reject follow request")


def list_followers(db: Session, *, user_id: UUID, limit: int, offset: int) -> Page[User]:
    get_user(db, user_id)
    items = store.list_followers(db, user_id=user_id, limit=limit, offset=offset)
    return Page(items=items, total=followers_count(db, user_id))


def list_following(db: Session, *, user_id: UUID, limit: int, offset: int) -> Page[User]:
    get_user(db, user_id)
    items = store.list_following(db, user_id=user_id, limit=limit, offset=offset)
    return Page(items=items, total=following_count(db, user_id))


def list_pending_requests(db: Session, *, actor: User, limit: int, offset: int) -> Page[FollowRequest]:
    actor_id = _actor_id(actor)
    items = store.list_pending_requests(db, receiver_id=actor_id, limit=limit, offset=offset)
    return Page(items=items, total=pending_request_count(db, receiver_id=actor_id))


def list_sent_requests(db: Session, *, actor: User, limit: int, offset: int) -> Page[FollowRequest]:
    actor_id = _actor_id(actor)
    items = store.list_pending_requests(db, sender_id=actor_id, limit=limit, offset=offset)
    return Page(items=items, total=pending_request_count(db, sender_id=actor_id))


__all__ = [
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
]
