from __future__ import annotations

from uuid import UUID

from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.service import get_accounts_by_username
from app.notifications import delivery, service, stream
from app.notifications.schemas import (
    CommentEventRequest,
    EventAcceptedResponse,
    LikeEventRequest,
    MarkAllReadResponse,
    MentionEventRequest,
    NotificationsPageResponse,
    UnreadCountResponse,
)
from app.runtime import SocialRuntime, commit
from app.social_graph import store
from shared.events import CommentCreated, LikeCreated, MentionDetected


async def get_notifications(
    user_id: UUID,
    db: AsyncSession,
    limit: int,
    offset: int,
    only_unread: bool,
) -> NotificationsPageResponse:
    items, total = await service.list_notifications(
        recipient_id=user_id,
        db=db,
        limit=limit,
        offset=offset,
        only_unread=only_unread,
    )
    return NotificationsPageResponse(
        items=await delivery.summarize(db, items),
        total=total,
        limit=limit,
        offset=offset,
    )


async def unread_count(user_id: UUID, db: AsyncSession) -> UnreadCountResponse:
    return UnreadCountResponse(
        unread=await service.count_unread(user_id, db),
        pending_follow_requests=await store.count_pending(db, user_id),
    )


async def mark_all_read(user_id: UUID, db: AsyncSession) -> MarkAllReadResponse:
    updated = await service.mark_all_read(recipient_id=user_id, db=db)
    await commit(db)
    return MarkAllReadResponse(updated=updated)


async def mark_read(user_id: UUID, notification_id: UUID, db: AsyncSession) -> None:
    await service.mark_read(recipient_id=user_id, notification_id=notification_id, db=db)
    await commit(db)


async def open_stream(
    user_id: UUID, db: AsyncSession, runtime: SocialRuntime
) -> StreamingResponse:
    unread = await service.count_unread(user_id, db)
    return StreamingResponse(
        stream.notification_stream(
            runtime.broker,
            user_id,
            unread_count=unread,
            keepalive_seconds=runtime.stream_keepalive_seconds,
        ),
        media_type=stream.MEDIA_TYPE,
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


# ── Internal event intake ─────────────────────────────────────────────────────

async def comment_created(
    body: CommentEventRequest, db: AsyncSession, runtime: SocialRuntime
) -> EventAcceptedResponse:
    event = CommentCreated(
        actor_id=body.actor_id,
        post_id=body.post_id,
        post_owner_id=body.post_owner_id,
        comment_id=body.comment_id,
        snippet=delivery.snippet(body.text),
    )
    records = await runtime.dispatch(db, [event])
    return EventAcceptedResponse(created=len(records))


async def like_created(
    body: LikeEventRequest, db: AsyncSession, runtime: SocialRuntime
) -> EventAcceptedResponse:
    event = LikeCreated(
        actor_id=body.actor_id,
        post_id=body.post_id,
        content_owner_id=body.content_owner_id,
        comment_id=body.comment_id,
    )
    records = await runtime.dispatch(db, [event])
    return EventAcceptedResponse(created=len(records))


async def mentions_detected(
    body: MentionEventRequest, db: AsyncSession, runtime: SocialRuntime
) -> EventAcceptedResponse:
    """Resolve @usernames in ``body.text`` and notify each mentioned account."""
    names = delivery.extract_mentions(body.text)
    accounts = await get_accounts_by_username(db, names)
    text = delivery.snippet(body.text)
    events = [
        MentionDetected(
            actor_id=body.actor_id,
            mentioned_id=account.id,
            post_id=body.post_id,
            comment_id=body.comment_id,
            snippet=text,
        )
        for account in accounts
    ]
    records = await runtime.dispatch(db, events)
    return EventAcceptedResponse(created=len(records))
