"""
Notification generator — maps domain events to persisted notification rows.

  FollowRequested  → FOLLOW_REQUEST  to the followed account
  FollowAccepted   → FOLLOW_ACCEPT   to the requester (resolves the request)
  NewFollower      → NEW_FOLLOWER    to the followed account (auto-accept)
  FollowDeclined   → none            (resolves the request)
  FollowCancelled  → none            (resolves the request)
  CommentCreated   → COMMENT         to the post owner
  LikeCreated      → LIKE            to the content owner, collapsed per actor
  MentionDetected  → MENTION         to the mentioned account, if visible to the actor
  ReportResolved   → REPORT_RESOLVED to the reporter

Comment, like and mention notifications are suppressed for self-actions, when
the recipient has blocked the actor, and when the recipient switched the type
off.  The generator only flushes; the caller commits before anything reaches
the broker.
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.models import Account
from app.accounts.service import get_account
from app.notifications import service
from app.notifications.constants import OPTIONAL_TYPES, NotificationType
from app.notifications.models import Notification
from app.social_graph import store, visibility
from app.social_graph.constants import Verdict
from shared.events import (
    CommentCreated,
    DomainEvent,
    FollowAccepted,
    FollowCancelled,
    FollowDeclined,
    FollowRequested,
    LikeCreated,
    MentionDetected,
    NewFollower,
    ReportResolved,
)

logger = logging.getLogger(__name__)

_Handler = Callable[[AsyncSession, Any], Awaitable[Notification | None]]


def _wants(recipient: Account, type_: NotificationType) -> bool:
    if type_ not in OPTIONAL_TYPES:
        return True
    prefs = recipient.notification_preferences or {}
    return bool(prefs.get(type_.value, True))


class NotificationGenerator:
    def __init__(self, *, like_dedup_window: timedelta) -> None:
        self.like_dedup_window = like_dedup_window
        self._handlers: dict[type, _Handler] = {
            FollowRequested: self._follow_requested,
            FollowAccepted: self._follow_accepted,
            NewFollower: self._new_follower,
            FollowDeclined: self._request_closed,
            FollowCancelled: self._request_closed,
            CommentCreated: self._comment_created,
            LikeCreated: self._like_created,
            MentionDetected: self._mention_detected,
            ReportResolved: self._report_resolved,
        }

    async def on_event(self, session: AsyncSession, event: DomainEvent) -> Notification | None:
        """Return the new notification, or None when nothing new was recorded."""
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"no notification mapping for {type(event).__name__}")
        return await handler(session, event)

    # ── Relationship events ───────────────────────────────────────────────────

    async def _follow_requested(
        self, session: AsyncSession, event: FollowRequested
    ) -> Notification:
        return await service.create_notification(
            event.following_id, event.follower_id, NotificationType.FOLLOW_REQUEST, session
        )

    async def _follow_accepted(
        self, session: AsyncSession, event: FollowAccepted
    ) -> Notification:
        if not event.auto:
            await service.resolve_follow_request(event.following_id, event.follower_id, session)
        return await service.create_notification(
            event.follower_id,
            event.following_id,
            NotificationType.FOLLOW_ACCEPT,
            session,
            context={"auto": event.auto},
        )

    async def _new_follower(self, session: AsyncSession, event: NewFollower) -> Notification:
        return await service.create_notification(
            event.following_id, event.follower_id, NotificationType.NEW_FOLLOWER, session
        )

    async def _request_closed(
        self, session: AsyncSession, event: FollowDeclined | FollowCancelled
    ) -> None:
        await service.resolve_follow_request(event.following_id, event.follower_id, session)

    # ── Content events ────────────────────────────────────────────────────────

    async def _deliverable(
        self,
        session: AsyncSession,
        recipient_id: UUID,
        actor_id: UUID,
        type_: NotificationType,
    ) -> Account | None:
        if recipient_id == actor_id:
            return None
        recipient = await get_account(session, recipient_id)
        if recipient is None:
            logger.debug("%s suppressed: recipient %s unknown", type_.value, recipient_id)
            return None
        if await store.block_exists(session, recipient_id, actor_id):
            logger.debug("%s suppressed: %s blocked %s", type_.value, recipient_id, actor_id)
            return None
        if not _wants(recipient, type_):
            logger.debug("%s suppressed by preference of %s", type_.value, recipient_id)
            return None
        return recipient

    async def _comment_created(
        self, session: AsyncSession, event: CommentCreated
    ) -> Notification | None:
        if await self._deliverable(
            session, event.post_owner_id, event.actor_id, NotificationType.COMMENT
        ) is None:
            return None
        return await service.create_notification(
            event.post_owner_id,
            event.actor_id,
            NotificationType.COMMENT,
            session,
            post_id=event.post_id,
            comment_id=event.comment_id,
            context={"snippet": event.snippet} if event.snippet else None,
        )

    async def _like_created(
        self, session: AsyncSession, event: LikeCreated
    ) -> Notification | None:
        if await self._deliverable(
            session, event.content_owner_id, event.actor_id, NotificationType.LIKE
        ) is None:
            return None
        since = datetime.now(timezone.utc) - self.like_dedup_window
        existing = await service.find_unread_like(
            event.content_owner_id, event.actor_id, event.post_id, event.comment_id, since, session
        )
        if existing is not None:
            await service.touch(existing, session)
            logger.debug("like collapsed into %s", existing.notification_id)
            return None
        return await service.create_notification(
            event.content_owner_id,
            event.actor_id,
            NotificationType.LIKE,
            session,
            post_id=event.post_id,
            comment_id=event.comment_id,
        )

    async def _mention_detected(
        self, session: AsyncSession, event: MentionDetected
    ) -> Notification | None:
        recipient = await self._deliverable(
            session, event.mentioned_id, event.actor_id, NotificationType.MENTION
        )
        if recipient is None:
            return None
        verdict = await visibility.resolve_for_account(session, event.actor_id, recipient)
        if verdict != Verdict.ALLOW:
            logger.debug("mention of %s suppressed: %s", recipient.id, verdict.value)
            return None
        return await service.create_notification(
            event.mentioned_id,
            event.actor_id,
            NotificationType.MENTION,
            session,
            post_id=event.post_id,
            comment_id=event.comment_id,
            context={"snippet": event.snippet} if event.snippet else None,
        )

    # ── Moderation events ─────────────────────────────────────────────────────

    async def _report_resolved(
        self, session: AsyncSession, event: ReportResolved
    ) -> Notification:
        return await service.create_notification(
            event.reporter_id,
            None,
            NotificationType.REPORT_RESOLVED,
            session,
            context={
                "report_id": str(event.report_id),
                "status": event.status,
                "action_taken": event.action_taken,
            },
        )
