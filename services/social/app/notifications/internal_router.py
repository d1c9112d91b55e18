"""
Service-to-service intake.  Content services report comments, likes and
mentions here; other services ask for visibility verdicts before serving a
subject's content.  Not exposed through the public gateway.
"""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.notifications import controller
from app.notifications.schemas import (
    CommentEventRequest,
    EventAcceptedResponse,
    LikeEventRequest,
    MentionEventRequest,
)
from app.runtime import SocialRuntime, get_runtime
from app.social_graph import controller as graph_ctrl
from app.social_graph.schemas import VisibilityResponse

router = APIRouter(prefix="/internal", tags=["Internal"])


@router.post(
    "/events/comment",
    response_model=EventAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Internal: a comment was created.",
)
async def comment_created(
    body: CommentEventRequest,
    db: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> EventAcceptedResponse:
    return await controller.comment_created(body, db, runtime)


@router.post(
    "/events/like",
    response_model=EventAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Internal: a post or comment was liked.",
)
async def like_created(
    body: LikeEventRequest,
    db: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> EventAcceptedResponse:
    return await controller.like_created(body, db, runtime)


@router.post(
    "/events/mention",
    response_model=EventAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Internal: text containing @mentions was published.",
)
async def mention_detected(
    body: MentionEventRequest,
    db: AsyncSession = Depends(get_db),
    runtime: SocialRuntime = Depends(get_runtime),
) -> EventAcceptedResponse:
    return await controller.mentions_detected(body, db, runtime)


@router.get(
    "/visibility",
    response_model=VisibilityResponse,
    summary="Internal: may viewer_id see subject_id's content?",
)
async def visibility(
    viewer_id: UUID = Query(...),
    subject_id: UUID = Query(...),
    viewer_is_staff: bool = Query(False),
    db: AsyncSession = Depends(get_db),
) -> VisibilityResponse:
    return await graph_ctrl.get_visibility(
        db, viewer_id, subject_id, viewer_is_staff=viewer_is_staff
    )
