"""
Verification domain — user-facing routes.

Routes:
  POST /api/v1/verification/requests     Submit a verification request
  GET  /api/v1/verification/status       My verification status (cached)
  GET  /api/v1/users/{user_id}/ban-status  Whether an account is banned (cached)

Requires: valid Bearer token (any role).
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.runtime import SocialRuntime, get_runtime
from app.verification import controller as ctrl
from app.verification.schemas import (
    BanStatusResponse,
    VerificationStatusResponse,
    VerificationSubmitRequest,
    VerificationSubmittedResponse,
)
from shared.auth.dependencies import get_current_user_required
from shared.models.user import CurrentUser

router = APIRouter(tags=["verification"])


@router.post(
    "/verification/requests",
    response_model=VerificationSubmittedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request account verification",
)
async def submit_request(
    body: VerificationSubmitRequest,
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> VerificationSubmittedResponse:
    return await ctrl.submit(session, runtime, current_user.id, body)


@router.get(
    "/verification/status",
    response_model=VerificationStatusResponse,
    summary="My verification status",
    description="Served from a short-lived cache; staff decisions evict it immediately.",
)
async def verification_status(
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> VerificationStatusResponse:
    return await ctrl.verification_status(session, runtime, current_user.id)


@router.get(
    "/users/{user_id}/ban-status",
    response_model=BanStatusResponse,
    summary="Whether an account is banned",
)
async def ban_status(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> BanStatusResponse:
    return await ctrl.ban_status(session, runtime, user_id)
