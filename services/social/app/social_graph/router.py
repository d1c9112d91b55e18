"""
Social graph domain — user-facing routes.

All routes prefixed /api/v1/users.

Routes:
  POST   /{user_id}/follow                         Follow or request to follow (50/hour rate limit)
  DELETE /{user_id}/follow                         Unfollow
  DELETE /{user_id}/follow-request                 Cancel my pending request
  GET    /{user_id}/follow-status                  Edge state in both directions
  POST   /{user_id}/block                          Block (auto-removes follow edges both ways)
  DELETE /{user_id}/block                          Unblock
  POST   /{user_id}/report                         Report a user/content
  GET    /me/follow-requests                       Incoming pending requests (paginated)
  GET    /me/follow-requests/count                 Incoming pending request count
  POST   /me/follow-requests/{user_id}/approve     Approve a pending request
  POST   /me/follow-requests/{user_id}/decline     Decline a pending request
  GET    /me/following                             Who I follow (paginated)
  GET    /me/followers                             Who follows me (paginated)
  GET    /me/blocked                               My block list (paginated)
  GET    /{user_id}/following                      View user's following (404 unless visible)
  GET    /{user_id}/followers                      View user's followers (404 unless visible)

Note: /me/... routes must be registered before /{user_id}/... routes of the same
shape so Starlette's literal-path matching takes precedence.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.rate_limit import limiter
from app.runtime import SocialRuntime, get_runtime
from app.social_graph import controller as ctrl
from app.social_graph.schemas import (
    BlockResponse,
    FollowActionResponse,
    FollowListResponse,
    FollowStatusResponse,
    PendingCountResponse,
    ReportRequest,
    ReportResponse,
    SocialRelationListResponse,
)
from shared.auth.dependencies import get_current_user_required
from shared.models.user import CurrentUser

router = APIRouter(prefix="/users", tags=["social-graph"])


# ── My lists and incoming requests (before /{user_id}/...) ────────────────────

@router.get(
    "/me/follow-requests",
    response_model=SocialRelationListResponse,
    summary="List incoming follow requests",
)
async def my_follow_requests(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
) -> SocialRelationListResponse:
    return await ctrl.list_pending_requests(session, current_user.id, page=page, size=size)


@router.get(
    "/me/follow-requests/count",
    response_model=PendingCountResponse,
    summary="Count incoming follow requests",
)
async def my_follow_request_count(
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
) -> PendingCountResponse:
    return await ctrl.pending_count(session, current_user.id)


@router.post(
    "/me/follow-requests/{user_id}/approve",
    response_model=FollowActionResponse,
    summary="Approve a follow request",
    description="The requester receives a follow_accept notification.",
)
async def approve_follow_request(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> FollowActionResponse:
    return await ctrl.approve_follow(session, runtime, current_user.id, user_id)


@router.post(
    "/me/follow-requests/{user_id}/decline",
    response_model=FollowActionResponse,
    summary="Decline a follow request",
)
async def decline_follow_request(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> FollowActionResponse:
    return await ctrl.decline_follow(session, runtime, current_user.id, user_id)


@router.get(
    "/me/following",
    response_model=FollowListResponse,
    summary="List users I follow",
)
async def my_following(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
) -> FollowListResponse:
    return await ctrl.list_following(session, current_user.id, current_user, page=page, size=size)


@router.get(
    "/me/followers",
    response_model=FollowListResponse,
    summary="List users who follow me",
)
async def my_followers(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
) -> FollowListResponse:
    return await ctrl.list_followers(session, current_user.id, current_user, page=page, size=size)


@router.get(
    "/me/blocked",
    response_model=SocialRelationListResponse,
    summary="List users I have blocked",
)
async def my_blocked(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
) -> SocialRelationListResponse:
    return await ctrl.list_blocked(session, current_user.id, page=page, size=size)


# ── Follow ─────────────────────────────────────────────────────────────────────

@router.post(
    "/{user_id}/follow",
    response_model=FollowActionResponse,
    status_code=status.HTTP_200_OK,
    summary="Follow a user",
    description=(
        "Public accounts are followed immediately; private accounts receive a "
        "pending request. Rate-limited to 50 follow actions per hour."
    ),
)
@limiter.limit("50/hour")
async def follow_user(
    request: Request,
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> FollowActionResponse:
    return await ctrl.request_follow(session, runtime, current_user.id, user_id)


@router.delete(
    "/{user_id}/follow",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unfollow a user",
)
async def unfollow_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> None:
    await ctrl.unfollow(session, runtime, current_user.id, user_id)


@router.delete(
    "/{user_id}/follow-request",
    response_model=FollowActionResponse,
    summary="Cancel a pending follow request",
)
async def cancel_follow_request(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> FollowActionResponse:
    return await ctrl.cancel_follow(session, runtime, current_user.id, user_id)


@router.get(
    "/{user_id}/follow-status",
    response_model=FollowStatusResponse,
    summary="Relationship between me and a user",
)
async def get_follow_status(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
) -> FollowStatusResponse:
    return await ctrl.follow_status(session, current_user.id, user_id)


# ── Block ──────────────────────────────────────────────────────────────────────

@router.post(
    "/{user_id}/block",
    response_model=BlockResponse,
    status_code=status.HTTP_200_OK,
    summary="Block a user",
    description="Automatically removes follow edges and pending requests in both directions.",
)
async def block_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> BlockResponse:
    return await ctrl.block_user(session, runtime, current_user.id, user_id)


@router.delete(
    "/{user_id}/block",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unblock a user",
)
async def unblock_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> None:
    await ctrl.unblock_user(session, runtime, current_user.id, user_id)


# ── Report ─────────────────────────────────────────────────────────────────────

@router.post(
    "/{user_id}/report",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report a user or their content",
    description=(
        "The path user_id provides context (whose content is being reported). "
        "The body carries the exact target (target_type + target_id) and reason."
    ),
)
async def report_user(
    user_id: uuid.UUID,  # noqa: ARG001
    body: ReportRequest,
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
) -> ReportResponse:
    return await ctrl.report_user(session, current_user.id, body)


# ── Another user's lists ───────────────────────────────────────────────────────

@router.get(
    "/{user_id}/following",
    response_model=FollowListResponse,
    summary="View another user's following list",
    description="Returns 404 unless the user's content is visible to you.",
)
async def user_following(
    user_id: uuid.UUID,
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
) -> FollowListResponse:
    return await ctrl.list_following(session, user_id, current_user, page=page, size=size)


@router.get(
    "/{user_id}/followers",
    response_model=FollowListResponse,
    summary="View another user's followers list",
    description="Returns 404 unless the user's content is visible to you.",
)
async def user_followers(
    user_id: uuid.UUID,
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
) -> FollowListResponse:
    return await ctrl.list_followers(session, user_id, current_user, page=page, size=size)
