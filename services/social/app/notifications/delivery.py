"""Shapes committed notifications and transient relationship events into
stream events for the broker."""
from __future__ import annotations

import re
from collections.abc import Iterable
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.models import Account
from app.notifications.broker import StreamEvent
from app.notifications.constants import (
    STREAM_FOLLOW_CANCELLED,
    STREAM_FOLLOW_DECLINED,
    STREAM_NOTIFICATION,
)
from app.notifications.models import Notification
from app.notifications.schemas import NotificationSummary, SenderRef
from shared.events import DomainEvent, FollowCancelled, FollowDeclined

_MENTION_RE = re.compile(r"(?<![\w@])@([A-Za-z0-9_.]{1,50})")
_SNIPPET_LEN = 140


def extract_mentions(text: str) -> list[str]:
    """Return unique @usernames in order of first appearance."""
    seen: dict[str, None] = {}
    for match in _MENTION_RE.finditer(text):
        seen.setdefault(match.group(1).rstrip("."), None)
    return [name for name in seen if name]


def snippet(text: str | None) -> str | None:
    if not text:
        return None
    text = " ".join(text.split())
    return text if len(text) <= _SNIPPET_LEN else text[: _SNIPPET_LEN - 1] + "…"


async def summarize(
    session: AsyncSession, records: Iterable[Notification]
) -> list[NotificationSummary]:
    records = list(records)
    sender_ids = {r.sender_id for r in records if r.sender_id is not None}
    senders: dict[UUID, SenderRef] = {}
    if sender_ids:
        result = await session.execute(sa.select(Account).where(Account.id.in_(sender_ids)))
        senders = {a.id: SenderRef.model_validate(a) for a in result.scalars().all()}
    return [
        NotificationSummary(
            id=r.notification_id,
            type=r.type,
            sender=senders.get(r.sender_id) if r.sender_id is not None else None,
            post_id=r.post_id,
            comment_id=r.comment_id,
            context=r.context,
            created_at=r.created_at,
            is_read=r.is_read,
        )
        for r in records
    ]


def notification_event(summary: NotificationSummary) -> StreamEvent:
    return StreamEvent(type=STREAM_NOTIFICATION, payload=summary.model_dump(mode="json"))


def transient_events(events: Iterable[DomainEvent]) -> list[tuple[UUID, StreamEvent]]:
    """Relationship changes pushed live without a persisted record."""
    out: list[tuple[UUID, StreamEvent]] = []
    for event in events:
        if isinstance(event, FollowDeclined):
            out.append((
                event.follower_id,
                StreamEvent(STREAM_FOLLOW_DECLINED, {"user_id": str(event.following_id)}),
            ))
        elif isinstance(event, FollowCancelled):
            out.append((
                event.following_id,
                StreamEvent(STREAM_FOLLOW_CANCELLED, {"user_id": str(event.follower_id)}),
            ))
    return out
