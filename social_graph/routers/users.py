"""User directory and follow management API routes."""
from __future__ import annotations

from typing import Iterable, cast
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import FollowRequest, User
from ..schemas import (
    FollowActionResponse,
    FollowEdgeResponse,
    FollowersResponse,
    FollowingResponse,
    FollowRequestResponse,
    RelationshipResponse,
    SearchUsersResponse,
    UserProfile,
    UserProfileResponse,
    UserSummary,
)
from ..services import (
    cancel_follow_request,
    follow_user,
    get_current_user,
    get_follow_stats,
    get_user_by_username,
    list_followers,
    list_following,
    remove_follower,
    resolve_many,
    resolve_relationship,
    search_users,
    unfollow_user,
)
from .pagination import PageParams, page_params

router = APIRouter(prefix="/users", tags=["users"])


def user_summaries(db: Session, *, viewer: User, users: Iterable[User]) -> list[UserSummary]:
    """Serialise ``users`` with the viewer-relative follow state embedded."""

    items = list(users)
    statuses = resolve_many(db, viewer_id=cast(UUID, viewer.id), targets=items)
    summaries: list[UserSummary] = []
    for user in items:
        relationship = statuses[cast(UUID, user.id)]
        summaries.append(
            UserSummary.model_validate(user).model_copy(
                update={
                    "is_following": relationship.is_following,
                    "follow_request_status": relationship.request_status,
                }
            )
        )
    return summaries


def request_response(db: Session, *, viewer: User, request: FollowRequest) -> FollowRequestResponse:
    sender, receiver = user_summaries(db, viewer=viewer, users=[request.sender, request.receiver])
    return FollowRequestResponse.model_validate(request).model_copy(update={"sender": sender, "receiver": receiver})


@router.get("/search", response_model=SearchUsersResponse)
async def search_users_endpoint(
    q: str = Query(..., min_length=1, max_length=150),
    page: PageParams = Depends(page_params),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> SearchUsersResponse:
    users, total = search_users(db, query=q, limit=page.limit, offset=page.offset)
    return SearchUsersResponse(users=user_summaries(db, viewer=current_user, users=users), total=total)


@router.post("/{user_id}/follow", response_model=FollowActionResponse, status_code=status.HTTP_201_CREATED)
async def follow_user_endpoint(
    user_id: UUID,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> FollowActionResponse:
    outcome = follow_user(db, actor=current_user, target_id=user_id)
    if not outcome.created:
        response.status_code = status.HTTP_200_OK
    return FollowActionResponse(
        message=outcome.message,
        status=outcome.status.value,
        follow=FollowEdgeResponse.model_validate(outcome.follow) if outcome.follow is not None else None,
        request=(
            request_response(db, viewer=current_user, request=outcome.request)
            if outcome.request is not None
            else None
        ),
    )


@router.delete("/{user_id}/follow", status_code=status.HTTP_204_NO_CONTENT)
async def unfollow_user_endpoint(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> Response:
    unfollow_user(db, actor=current_user, target_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{user_id}/follower", status_code=status.HTTP_204_NO_CONTENT)
async def remove_follower_endpoint(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> Response:
    remove_follower(db, actor=current_user, follower_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{user_id}/follow-request", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_follow_request_endpoint(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> Response:
    cancel_follow_request(db, actor=current_user, target_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{user_id}/followers", response_model=FollowersResponse)
async def list_followers_endpoint(
    user_id: UUID,
    page: PageParams = Depends(page_params),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> FollowersResponse:
    result = list_followers(db, user_id=user_id, limit=page.limit, offset=page.offset)
    return FollowersResponse(followers=user_summaries(db, viewer=current_user, users=result.items), total=result.total)


@router.get("/{user_id}/following", response_model=FollowingResponse)
async def list_following_endpoint(
    user_id: UUID,
    page: PageParams = Depends(page_params),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> FollowingResponse:
    result = list_following(db, user_id=user_id, limit=page.limit, offset=page.offset)
    return FollowingResponse(following=user_summaries(db, viewer=current_user, users=result.items), total=result.total)


@router.get("/{user_id}/relationship", response_model=RelationshipResponse)
async def relationship_endpoint(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> RelationshipResponse:
    relationship = resolve_relationship(db, viewer_id=cast(UUID, current_user.id), target_id=user_id)
    return RelationshipResponse(
        is_following=relationship.is_following,
        request_status=relationship.request_status,
        target_is_private=relationship.target_is_private,
        state=relationship.state.value,
    )


@router.get("/{username}", response_model=UserProfileResponse)
async def user_profile_endpoint(
    username: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> UserProfileResponse:
    user = get_user_by_username(db, username)
    user_id = cast(UUID, user.id)
    stats = get_follow_stats(db, user_id=user_id, viewer_id=cast(UUID, current_user.id))
    profile = UserProfile.model_validate(
        {
            **UserSummary.model_validate(user).model_dump(),
            "is_following": stats.is_following,
            "follow_request_status": stats.request_status,
            "followers_count": stats.followers_count,
            "following_count": stats.following_count,
        }
    )
    return UserProfileResponse(user=profile)


__all__ = ["router", "user_summaries", "request_response"]
