"""Domain events exchanged between the relationship state machine, content
services and the notification generator."""
from datetime import datetime, timezone
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _Event(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    occurred_at: datetime = Field(default_factory=_utcnow)


# ── Relationship events ───────────────────────────────────────────────────────

class FollowRequested(_Event):
    event_type: Literal["follow.requested"] = "follow.requested"
    follower_id: UUID
    following_id: UUID


class FollowAccepted(_Event):
    """Edge reached ACCEPTED, either by approval or by auto-accept (`auto`)."""

    event_type: Literal["follow.accepted"] = "follow.accepted"
    follower_id: UUID
    following_id: UUID
    auto: bool = False


class NewFollower(_Event):
    event_type: Literal["follow.new_follower"] = "follow.new_follower"
    follower_id: UUID
    following_id: UUID


class FollowDeclined(_Event):
    event_type: Literal["follow.declined"] = "follow.declined"
    follower_id: UUID
    following_id: UUID


class FollowCancelled(_Event):
    event_type: Literal["follow.cancelled"] = "follow.cancelled"
    follower_id: UUID
    following_id: UUID


# ── Content events (sent by the content service) ──────────────────────────────

class CommentCreated(_Event):
    event_type: Literal["comment.created"] = "comment.created"
    actor_id: UUID
    post_id: UUID
    post_owner_id: UUID
    comment_id: UUID
    snippet: str | None = None


class LikeCreated(_Event):
    event_type: Literal["like.created"] = "like.created"
    actor_id: UUID
    post_id: UUID
    content_owner_id: UUID
    comment_id: UUID | None = None


class MentionDetected(_Event):
    event_type: Literal["mention.detected"] = "mention.detected"
    actor_id: UUID
    mentioned_id: UUID
    post_id: UUID | None = None
    comment_id: UUID | None = None
    snippet: str | None = None


# ── Moderation events ─────────────────────────────────────────────────────────

class ReportResolved(_Event):
    event_type: Literal["report.resolved"] = "report.resolved"
    report_id: UUID
    reporter_id: UUID
    status: str
    action_taken: str | None = None


DomainEvent = Annotated[
    Union[
        FollowRequested,
        FollowAccepted,
        NewFollower,
        FollowDeclined,
        FollowCancelled,
        CommentCreated,
        LikeCreated,
        MentionDetected,
        ReportResolved,
    ],
    Field(discriminator="event_type"),
]
