"""
Moderation domain — staff-facing routes.

Routes:
  PATCH /api/v1/admin/moderation/users/{user_id}/ban                 Ban an account
  PATCH /api/v1/admin/moderation/users/{user_id}/unban               Lift a ban
  PATCH /api/v1/admin/moderation/users/{user_id}/revoke-verification Clear the verified flag
  GET   /api/v1/admin/moderation/verification/queue                  FIFO list of PENDING requests
  PATCH /api/v1/admin/moderation/verification/{request_id}/review    Approve or reject

Requires: MODERATOR, ADMIN or SUPER_ADMIN role.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.moderation import controller as ctrl
from app.moderation.schemas import (
    AccountStatusResponse,
    BanRequest,
    VerificationQueueResponse,
    VerificationReviewRequest,
    VerificationReviewResponse,
)
from app.runtime import SocialRuntime, get_runtime
from shared.auth.dependencies import require_roles
from shared.constants import STAFF_ROLES
from shared.models.user import CurrentUser

router = APIRouter(prefix="/admin/moderation", tags=["admin-moderation"])

require_staff = require_roles(*STAFF_ROLES)


@router.patch(
    "/users/{user_id}/ban",
    response_model=AccountStatusResponse,
    summary="[Admin] Ban an account",
    description="Banned accounts disappear from every read surface for non-staff viewers.",
)
async def ban_user(
    user_id: uuid.UUID,
    body: BanRequest,
    staff: CurrentUser = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> AccountStatusResponse:
    return await ctrl.ban_user(session, runtime, user_id, body)


@router.patch(
    "/users/{user_id}/unban",
    response_model=AccountStatusResponse,
    summary="[Admin] Lift a ban",
)
async def unban_user(
    user_id: uuid.UUID,
    staff: CurrentUser = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> AccountStatusResponse:
    return await ctrl.unban_user(session, runtime, user_id)


@router.patch(
    "/users/{user_id}/revoke-verification",
    response_model=AccountStatusResponse,
    summary="[Admin] Revoke an account's verified badge",
)
async def revoke_verification(
    user_id: uuid.UUID,
    staff: CurrentUser = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> AccountStatusResponse:
    return await ctrl.revoke_verification(session, runtime, user_id)


@router.get(
    "/verification/queue",
    response_model=VerificationQueueResponse,
    summary="[Admin] List PENDING verification requests (FIFO order)",
)
async def get_queue(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    staff: CurrentUser = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
) -> VerificationQueueResponse:
    return await ctrl.get_queue(session, page, size)


@router.patch(
    "/verification/{request_id}/review",
    response_model=VerificationReviewResponse,
    summary="[Admin] Approve or reject a verification request",
    description="action=approve sets the account's verified flag; action=reject lets them request again.",
)
async def review_verification(
    request_id: uuid.UUID,
    body: VerificationReviewRequest,
    staff: CurrentUser = Depends(require_staff),
    session: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> VerificationReviewResponse:
    return await ctrl.review_verification(session, runtime, request_id, staff.id, body)
