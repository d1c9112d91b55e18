"""
Notifications domain — recipient-facing routes.

Routes:
  GET  /api/v1/notifications                      List my notifications (newest first)
  GET  /api/v1/notifications/unread-count         Unread + pending follow request counts
  GET  /api/v1/notifications/stream               Live NDJSON stream
  POST /api/v1/notifications/mark-all-read        Mark everything read
  POST /api/v1/notifications/{notification_id}/read
"""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.notifications import controller
from app.notifications.schemas import (
    MarkAllReadResponse,
    NotificationsPageResponse,
    UnreadCountResponse,
)
from app.runtime import SocialRuntime, get_runtime
from shared.auth.dependencies import get_current_user_required
from shared.models.user import CurrentUser

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get(
    "",
    response_model=NotificationsPageResponse,
    summary="List my notifications",
    description="Returns notifications for the authenticated user, newest first.",
)
async def list_notifications(
    limit: int = Query(20, ge=1, le=50, description="Page size."),
    offset: int = Query(0, ge=0, description="Pagination offset."),
    only_unread: bool = Query(
        default=False,
        description="When true, return only unread notifications.",
    ),
    current_user: CurrentUser = Depends(get_current_user_required),
    db: AsyncSession = Depends(get_db),
) -> NotificationsPageResponse:
    return await controller.get_notifications(
        user_id=current_user.id,
        db=db,
        limit=limit,
        offset=offset,
        only_unread=only_unread,
    )


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Count my unread notifications",
)
async def unread_count(
    current_user: CurrentUser = Depends(get_current_user_required),
    db: AsyncSession = Depends(get_db),
) -> UnreadCountResponse:
    return await controller.unread_count(current_user.id, db)


@router.get(
    "/stream",
    response_class=StreamingResponse,
    summary="Live notification stream",
    description=(
        "Newline-delimited JSON. The first line reports the unread count; "
        "events published before the stream opened are not replayed."
    ),
)
async def notification_stream(
    current_user: CurrentUser = Depends(get_current_user_required),
    db: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> StreamingResponse:
    return await controller.open_stream(current_user.id, db, runtime)


@router.post(
    "/mark-all-read",
    response_model=MarkAllReadResponse,
    summary="Mark all my notifications as read",
)
async def mark_all_read(
    current_user: CurrentUser = Depends(get_current_user_required),
    db: AsyncSession = Depends(get_db),
) -> MarkAllReadResponse:
    return await controller.mark_all_read(user_id=current_user.id, db=db)


@router.post(
    "/{notification_id}/read",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Mark a single notification as read",
)
async def mark_read(
    notification_id: UUID,
    current_user: CurrentUser = Depends(get_current_user_required),
    db: AsyncSession = Depends(get_db),
) -> None:
    await controller.mark_read(user_id=current_user.id, notification_id=notification_id, db=db)
