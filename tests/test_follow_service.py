"""Service-level tests for the follow/request state machine."""
from __future__ import annotations

import random
import uuid

import pytest
from sqlalchemy import func, select

from social_graph.errors import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    SocialGraphError,
    ValidationError,
)
from social_graph.models import Follow, FollowRequest, FollowRequestStatus
from social_graph.services import (
    FollowStatus,
    accept_follow_request,
    cancel_follow_request,
    cancel_follow_request_by_id,
    follow_user,
    followers_count,
    following_count,
    list_followers,
    list_following,
    list_pending_requests,
    list_sent_requests,
    reject_follow_request,
    remove_follower,
    resolve_relationship,
    unfollow_user,
)


def _edge_count(db, *, following_id) -> int:
    return int(db.scalar(select(func.count()).select_from(Follow).where(Follow.following_id == following_id)))


def _pending_count(db, *, sender_id, receiver_id) -> int:
    stmt = (
        select(func.count())
        .select_from(FollowRequest)
        .where(
            FollowRequest.sender_id == sender_id,
            FollowRequest.receiver_id == receiver_id,
            FollowRequest.status == FollowRequestStatus.PENDING.value,
        )
    )
    return int(db.scalar(stmt))


def test_follow_public_user_creates_edge_and_repeat_is_noop(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob")

    first = follow_user(db, actor=alice, target_id=bob.id)
    assert first.status is FollowStatus.FOLLOWED
    assert first.created is True
    assert first.follow is not None
    assert resolve_relationship(db, viewer_id=alice.id, target_id=bob.id).is_following is True

    second = follow_user(db, actor=alice, target_id=bob.id)
    assert second.status is FollowStatus.ALREADY_FOLLOWING
    assert second.created is False
    assert second.follow.id == first.follow.id
    assert "already following" in second.message
    assert followers_count(db, bob.id) == 1
    assert following_count(db, alice.id) == 1


def test_follow_private_user_creates_single_pending_request(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob", is_private=True)

    first = follow_user(db, actor=alice, target_id=bob.id)
    assert first.status is FollowStatus.REQUESTED
    assert first.request is not None
    assert first.request.status == FollowRequestStatus.PENDING
    assert first.follow is None

    second = follow_user(db, actor=alice, target_id=bob.id)
    assert second.status is FollowStatus.ALREADY_PENDING
    assert second.request.id == first.request.id
    assert "already pending" in second.message

    assert _pending_count(db, sender_id=alice.id, receiver_id=bob.id) == 1
    assert followers_count(db, bob.id) == 0
    relationship = resolve_relationship(db, viewer_id=alice.id, target_id=bob.id)
    assert relationship.is_following is False
    assert relationship.request_status == "PENDING"
    assert relationship.target_is_private is True


def test_unfollow_returns_pair_to_none_and_decrements_count(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob")
    carol = user_factory("carol")
    follow_user(db, actor=alice, target_id=bob.id)
    follow_user(db, actor=carol, target_id=bob.id)
    before = followers_count(db, bob.id)

    unfollow_user(db, actor=alice, target_id=bob.id)

    assert followers_count(db, bob.id) == before - 1
    relationship = resolve_relationship(db, viewer_id=alice.id, target_id=bob.id)
    assert relationship.is_following is False
    assert relationship.request_status is None


def test_unfollow_when_not_following_is_invalid_state(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob")

    with pytest.raises(InvalidStateError):
        unfollow_user(db, actor=alice, target_id=bob.id)


def test_unfollow_with_pending_request_is_invalid_state(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob", is_private=True)
    follow_user(db, actor=alice, target_id=bob.id)

    with pytest.raises(InvalidStateError):
        unfollow_user(db, actor=alice, target_id=bob.id)
    assert _pending_count(db, sender_id=alice.id, receiver_id=bob.id) == 1


def test_accept_request_creates_exactly_one_edge(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob", is_private=True)
    request = follow_user(db, actor=alice, target_id=bob.id).request

    accepted = accept_follow_request(db, actor=bob, request_id=request.id)

    assert accepted.status == FollowRequestStatus.ACCEPTED
    assert _edge_count(db, following_id=bob.id) == 1
    relationship = resolve_relationship(db, viewer_id=alice.id, target_id=bob.id)
    assert relationship.is_following is True
    assert relationship.request_status is None


def test_accept_is_idempotent_for_receiver(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob", is_private=True)
    request = follow_user(db, actor=alice, target_id=bob.id).request
    accept_follow_request(db, actor=bob, request_id=request.id)

    again = accept_follow_request(db, actor=bob, request_id=request.id)

    assert again.status == FollowRequestStatus.ACCEPTED
    assert _edge_count(db, following_id=bob.id) == 1


def test_reject_leaves_no_edge_and_does_not_block_new_request(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob", is_private=True)
    request = follow_user(db, actor=alice, target_id=bob.id).request

    rejected = reject_follow_request(db, actor=bob, request_id=request.id)

    assert rejected.status == FollowRequestStatus.REJECTED
    assert _edge_count(db, following_id=bob.id) == 0
    relationship = resolve_relationship(db, viewer_id=alice.id, target_id=bob.id)
    assert relationship.is_following is False
    assert relationship.request_status is None

    retry = follow_user(db, actor=alice, target_id=bob.id)
    assert retry.status is FollowStatus.REQUESTED
    assert retry.request.id != request.id
    # The rejected record stays around for audit.
    assert db.get(FollowRequest, request.id).status == FollowRequestStatus.REJECTED


def test_reject_twice_is_noop_but_accept_after_reject_conflicts(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob", is_private=True)
    request = follow_user(db, actor=alice, target_id=bob.id).request
    reject_follow_request(db, actor=bob, request_id=request.id)

    assert reject_follow_request(db, actor=bob, request_id=request.id).status == FollowRequestStatus.REJECTED
    with pytest.raises(ConflictError):
        accept_follow_request(db, actor=bob, request_id=request.id)


def test_reject_after_accept_conflicts(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob", is_private=True)
    request = follow_user(db, actor=alice, target_id=bob.id).request
    accept_follow_request(db, actor=bob, request_id=request.id)

    with pytest.raises(ConflictError):
        reject_follow_request(db, actor=bob, request_id=request.id)
    assert _edge_count(db, following_id=bob.id) == 1


def test_only_receiver_may_respond(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob", is_private=True)
    mallory = user_factory("mallory")
    request = follow_user(db, actor=alice, target_id=bob.id).request

    with pytest.raises(ForbiddenError):
        accept_follow_request(db, actor=mallory, request_id=request.id)
    with pytest.raises(ForbiddenError):
        reject_follow_request(db, actor=alice, request_id=request.id)
    assert _pending_count(db, sender_id=alice.id, receiver_id=bob.id) == 1


def test_unknown_request_id_is_not_found(db, user_factory):
    bob = user_factory("bob")

    with pytest.raises(NotFoundError):
        accept_follow_request(db, actor=bob, request_id=uuid.uuid4())
    with pytest.raises(NotFoundError):
        reject_follow_request(db, actor=bob, request_id=uuid.uuid4())
    with pytest.raises(NotFoundError):
        cancel_follow_request_by_id(db, actor=bob, request_id=uuid.uuid4())


def test_cancel_then_request_again_creates_new_pending_request(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob", is_private=True)
    original = follow_user(db, actor=alice, target_id=bob.id).request

    cancel_follow_request(db, actor=alice, target_id=bob.id)

    assert db.scalar(select(FollowRequest).where(FollowRequest.id == original.id)) is None
    assert resolve_relationship(db, viewer_id=alice.id, target_id=bob.id).request_status is None

    renewed = follow_user(db, actor=alice, target_id=bob.id)
    assert renewed.status is FollowStatus.REQUESTED
    assert renewed.request.id != original.id
    assert _pending_count(db, sender_id=alice.id, receiver_id=bob.id) == 1


def test_cancel_without_pending_request_is_invalid_state(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob", is_private=True)

    with pytest.raises(InvalidStateError):
        cancel_follow_request(db, actor=alice, target_id=bob.id)


def test_cancel_by_id_requires_sender(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob", is_private=True)
    request = follow_user(db, actor=alice, target_id=bob.id).request

    with pytest.raises(ForbiddenError):
        cancel_follow_request_by_id(db, actor=bob, request_id=request.id)

    cancel_follow_request_by_id(db, actor=alice, request_id=request.id)
    assert _pending_count(db, sender_id=alice.id, receiver_id=bob.id) == 0


def test_cancel_by_id_after_accept_is_invalid_state(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob", is_private=True)
    request = follow_user(db, actor=alice, target_id=bob.id).request
    accept_follow_request(db, actor=bob, request_id=request.id)

    with pytest.raises(InvalidStateError):
        cancel_follow_request_by_id(db, actor=alice, request_id=request.id)


def test_remove_follower_deletes_edge_from_target_side(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob")
    follow_user(db, actor=alice, target_id=bob.id)

    remove_follower(db, actor=bob, follower_id=alice.id)

    assert followers_count(db, bob.id) == 0
    assert resolve_relationship(db, viewer_id=alice.id, target_id=bob.id).is_following is False
    with pytest.raises(InvalidStateError):
        remove_follower(db, actor=bob, follower_id=alice.id)


def test_self_targeted_operations_are_rejected(db, user_factory):
    alice = user_factory("alice")

    with pytest.raises(ValidationError):
        follow_user(db, actor=alice, target_id=alice.id)
    with pytest.raises(ValidationError):
        unfollow_user(db, actor=alice, target_id=alice.id)
    with pytest.raises(ValidationError):
        remove_follower(db, actor=alice, follower_id=alice.id)
    with pytest.raises(ValidationError):
        cancel_follow_request(db, actor=alice, target_id=alice.id)


def test_follow_unknown_user_is_not_found(db, user_factory):
    alice = user_factory("alice")

    with pytest.raises(NotFoundError):
        follow_user(db, actor=alice, target_id=uuid.uuid4())


def test_lists_are_paginated_with_totals(db, user_factory):
    star = user_factory("star")
    fans = [user_factory(f"fan{index}") for index in range(5)]
    for fan in fans:
        follow_user(db, actor=fan, target_id=star.id)

    first_page = list_followers(db, user_id=star.id, limit=2, offset=0)
    second_page = list_followers(db, user_id=star.id, limit=2, offset=2)

    assert first_page.total == 5
    assert len(first_page.items) == 2
    assert len(second_page.items) == 2
    assert {user.id for user in first_page.items}.isdisjoint({user.id for user in second_page.items})
    # Newest follower first.
    assert first_page.items[0].id == fans[-1].id

    following = list_following(db, user_id=fans[0].id, limit=10, offset=0)
    assert following.total == 1
    assert following.items[0].id == star.id


def test_pending_and_sent_lists_only_show_live_requests(db, user_factory):
    owner = user_factory("owner", is_private=True)
    first = user_factory("first")
    second = user_factory("second")
    kept = follow_user(db, actor=first, target_id=owner.id).request
    dropped = follow_user(db, actor=second, target_id=owner.id).request
    reject_follow_request(db, actor=owner, request_id=dropped.id)

    inbox = list_pending_requests(db, actor=owner, limit=10, offset=0)
    assert inbox.total == 1
    assert [item.id for item in inbox.items] == [kept.id]

    outbox = list_sent_requests(db, actor=first, limit=10, offset=0)
    assert outbox.total == 1
    assert outbox.items[0].receiver_id == owner.id
    assert list_sent_requests(db, actor=second, limit=10, offset=0).total == 0


def test_counts_match_edges_after_random_operations(db, user_factory):
    rng = random.Random(1234)
    users = [user_factory(f"user{index}", is_private=index % 2 == 0) for index in range(5)]

    for _ in range(120):
        actor, target = rng.sample(users, 2)
        operation = rng.choice(["follow", "unfollow", "cancel", "accept", "reject", "remove"])
        try:
            if operation == "follow":
                follow_user(db, actor=actor, target_id=target.id)
            elif operation == "unfollow":
                unfollow_user(db, actor=actor, target_id=target.id)
            elif operation == "cancel":
                cancel_follow_request(db, actor=actor, target_id=target.id)
            elif operation == "remove":
                remove_follower(db, actor=target, follower_id=actor.id)
            else:
                inbox = list_pending_requests(db, actor=target, limit=100, offset=0)
                if not inbox.items:
                    continue
                request = rng.choice(inbox.items)
                if operation == "accept":
                    accept_follow_request(db, actor=target, request_id=request.id)
                else:
                    reject_follow_request(db, actor=target, request_id=request.id)
        except SocialGraphError:
            continue

        for user in users:
            assert followers_count(db, user.id) == _edge_count(db, following_id=user.id)

    for actor in users:
        for target in users:
            if actor.id == target.id:
                continue
            relationship = resolve_relationship(db, viewer_id=actor.id, target_id=target.id)
            # Never both an edge and a live request for one ordered pair.
            assert not (relationship.is_following and relationship.request_status == "PENDING")
            assert _pending_count(db, sender_id=actor.id, receiver_id=target.id) <= 1
