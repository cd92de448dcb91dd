"""Follow request inbox/outbox API routes."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import User
from ..schemas import FollowRequestResponse, FollowRequestsResponse
from ..services import (
    accept_follow_request,
    cancel_follow_request_by_id,
    get_current_user,
    list_pending_requests,
    list_sent_requests,
    reject_follow_request,
)
from .pagination import PageParams, page_params
from .users import request_response

router = APIRouter(prefix="/follow-requests", tags=["follow-requests"])


@router.get("/pending", response_model=FollowRequestsResponse)
async def pending_requests_endpoint(
    page: PageParams = Depends(page_params),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> FollowRequestsResponse:
    result = list_pending_requests(db, actor=current_user, limit=page.limit, offset=page.offset)
    return FollowRequestsResponse(
        requests=[request_response(db, viewer=current_user, request=item) for item in result.items],
        total=result.total,
    )


@router.get("/sent", response_model=FollowRequestsResponse)
async def sent_requests_endpoint(
    page: PageParams = Depends(page_params),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> FollowRequestsResponse:
    result = list_sent_requests(db, actor=current_user, limit=page.limit, offset=page.offset)
    return FollowRequestsResponse(
        requests=[request_response(db, viewer=current_user, request=item) for item in result.items],
        total=result.total,
    )


@router.post("/{request_id}/accept", response_model=FollowRequestResponse)
async def accept_request_endpoint(
    request_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> FollowRequestResponse:
    request = accept_follow_request(db, actor=current_user, request_id=request_id)
    return request_response(db, viewer=current_user, request=request)


@router.post("/{request_id}/reject", response_model=FollowRequestResponse)
async def reject_request_endpoint(
    request_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> FollowRequestResponse:
    request = reject_follow_request(db, actor=current_user, request_id=request_id)
    return request_response(db, viewer=current_user, request=request)


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_request_endpoint(
    request_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> Response:
    cancel_follow_request_by_id(db, actor=current_user, request_id=request_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
