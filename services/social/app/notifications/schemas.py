from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.notifications.constants import NotificationType


class SenderRef(BaseModel):
    """Minimal public summary of the account that caused a notification."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    avatar_url: str | None = None
    verified: bool = False


class NotificationSummary(BaseModel):
    """Single notification item for the notifications feed and the live stream."""

    id: UUID
    type: NotificationType
    sender: SenderRef | None = None
    post_id: UUID | None = None
    comment_id: UUID | None = None
    context: dict[str, Any] | None = None
    created_at: datetime
    is_read: bool


class NotificationsPageResponse(BaseModel):
    """Offset-paginated notifications list for the current user."""

    items: list[NotificationSummary]
    total: int = Field(description="Total notifications matching the filter.")
    limit: int = Field(description="Requested page size.")
    offset: int = Field(description="Requested offset.")


class UnreadCountResponse(BaseModel):
    unread: int
    pending_follow_requests: int


class MarkAllReadResponse(BaseModel):
    updated: int


# ── Internal event intake (service-to-service) ────────────────────────────────

class _Internal(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class CommentEventRequest(_Internal):
    actor_id: UUID
    post_id: UUID
    post_owner_id: UUID
    comment_id: UUID
    text: str | None = Field(None, max_length=2_000)


class LikeEventRequest(_Internal):
    actor_id: UUID
    post_id: UUID
    content_owner_id: UUID
    comment_id: UUID | None = None


class MentionEventRequest(_Internal):
    actor_id: UUID
    text: str = Field(min_length=1, max_length=2_000)
    post_id: UUID | None = None
    comment_id: UUID | None = None


class EventAcceptedResponse(BaseModel):
    created: int = Field(description="Notifications newly recorded for this event.")
