from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotificationNotFound
from app.notifications.constants import NotificationType
from app.notifications.models import Notification


async def list_notifications(
    recipient_id: UUID,
    db: AsyncSession,
    limit: int,
    offset: int,
    only_unread: bool,
) -> tuple[list[Notification], int]:
    base = select(Notification).where(Notification.recipient_id == recipient_id)
    if only_unread:
        base = base.where(Notification.is_read.is_(False))

    count_query = select(func.count()).select_from(base.subquery())
    total = (await db.execute(count_query)).scalar_one()

    rows = await db.execute(
        base.order_by(Notification.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    items = list(rows.scalars().all())
    return items, total


async def count_unread(recipient_id: UUID, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Notification)
        .where(Notification.recipient_id == recipient_id, Notification.is_read.is_(False))
    )
    return result.scalar_one()


async def mark_all_read(recipient_id: UUID, db: AsyncSession) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.recipient_id == recipient_id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    return result.rowcount


async def mark_read(recipient_id: UUID, notification_id: UUID, db: AsyncSession) -> None:
    """Flip one notification to read.  Marking an already-read one is a no-op;
    someone else's notification is indistinguishable from a missing one."""
    result = await db.execute(
        update(Notification)
        .where(
            Notification.recipient_id == recipient_id,
            Notification.notification_id == notification_id,
        )
        .values(is_read=True)
    )
    if result.rowcount == 0:
        raise NotificationNotFound()


async def create_notification(
    recipient_id: UUID,
    sender_id: UUID | None,
    type_: NotificationType,
    db: AsyncSession,
    *,
    post_id: UUID | None = None,
    comment_id: UUID | None = None,
    context: dict[str, Any] | None = None,
) -> Notification:
    notification = Notification(
        recipient_id=recipient_id,
        sender_id=sender_id,
        type=type_,
        post_id=post_id,
        comment_id=comment_id,
        context=context,
        is_read=False,
        created_at=datetime.now(timezone.utc),
    )
    db.add(notification)
    await db.flush()
    return notification


async def find_unread_like(
    recipient_id: UUID,
    sender_id: UUID,
    post_id: UUID,
    comment_id: UUID | None,
    since: datetime,
    db: AsyncSession,
) -> Notification | None:
    query = select(Notification).where(
        Notification.recipient_id == recipient_id,
        Notification.sender_id == sender_id,
        Notification.type == NotificationType.LIKE,
        Notification.post_id == post_id,
        Notification.is_read.is_(False),
        Notification.created_at >= since,
    )
    if comment_id is None:
        query = query.where(Notification.comment_id.is_(None))
    else:
        query = query.where(Notification.comment_id == comment_id)
    result = await db.execute(query.order_by(Notification.created_at.desc()).limit(1))
    return result.scalar_one_or_none()


async def touch(notification: Notification, db: AsyncSession) -> Notification:
    notification.created_at = datetime.now(timezone.utc)
    await db.flush()
    return notification


async def resolve_follow_request(
    recipient_id: UUID, sender_id: UUID, db: AsyncSession
) -> int:
    """Mark the outstanding FOLLOW_REQUEST from sender to recipient as read."""
    result = await db.execute(
        update(Notification)
        .where(
            Notification.recipient_id == recipient_id,
            Notification.sender_id == sender_id,
            Notification.type == NotificationType.FOLLOW_REQUEST,
            Notification.is_read.is_(False),
        )
        .values(is_read=True)
    )
    return result.rowcount
