"""
Profile domain — routes.

Routes:
  GET /api/v1/users/me/profile          My own profile (always full)
  GET /api/v1/users/{user_id}/profile   Another account's profile

A blocked or banned account answers 404 exactly like a missing one.  A private
account the viewer does not follow returns the summary with is_restricted=true.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.profile.schemas import ProfileResponse
from app.profile.service import get_profile
from shared.auth.dependencies import get_current_user_required
from shared.models.user import CurrentUser

router = APIRouter(prefix="/users", tags=["profile"])


@router.get("/me/profile", response_model=ProfileResponse, summary="Get my profile")
async def my_profile(
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    return await get_profile(
        session, current_user.id, viewer_id=current_user.id, viewer_is_staff=current_user.is_staff
    )


@router.get(
    "/{user_id}/profile",
    response_model=ProfileResponse,
    summary="Get a user's profile",
)
async def user_profile(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user_required),
    session: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    return await get_profile(
        session, user_id, viewer_id=current_user.id, viewer_is_staff=current_user.is_staff
    )
