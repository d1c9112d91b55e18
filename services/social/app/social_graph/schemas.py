"""
Social graph domain — Pydantic V2 request/response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.social_graph.constants import FollowState, ReportStatus, ReportTargetType, Verdict


class _Base(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


# ── Embedded user reference (used inside list items) ───────────────────────────

class SocialUserRef(BaseModel):
    """Minimal public summary: always visible unless blocked or banned."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    full_name: str | None = None
    avatar_url: str | None = None
    verified: bool


# ── Follow ─────────────────────────────────────────────────────────────────────

class FollowActionResponse(BaseModel):
    state: FollowState | None = Field(description="Edge state after the action; null once removed.")
    message: str


class FollowStatusResponse(BaseModel):
    state: FollowState | None
    is_following: bool
    has_pending_request: bool
    is_followed_by: bool


class FollowListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID           # follow_id
    user: SocialUserRef     # the other party (following or follower depending on context)
    created_at: datetime
    is_followed_by_me: bool  # does the current authed user follow this person?


class FollowListResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    items: list[FollowListItem]
    total: int
    page: int
    size: int


class PendingCountResponse(BaseModel):
    count: int


# ── Block / follow requests ────────────────────────────────────────────────────

class SocialRelationItem(BaseModel):
    """Generic item for blocked lists and incoming follow requests."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user: SocialUserRef
    created_at: datetime


class SocialRelationListResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    items: list[SocialRelationItem]
    total: int
    page: int
    size: int


class BlockResponse(BaseModel):
    message: str
    follow_edges_removed: int


# ── Visibility (internal) ──────────────────────────────────────────────────────

class VisibilityResponse(BaseModel):
    viewer_id: uuid.UUID
    subject_id: uuid.UUID
    verdict: Verdict
    summary_visible: bool


# ── Report ─────────────────────────────────────────────────────────────────────

class ReportRequest(_Base):
    target_type: ReportTargetType
    target_id: uuid.UUID
    reason: str = Field(min_length=1, max_length=255)


class ReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    status: ReportStatus
    created_at: datetime


# ── Admin report schemas ───────────────────────────────────────────────────────

class AdminReportItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    reporter_id: uuid.UUID
    target_type: ReportTargetType
    target_id: uuid.UUID
    reason: str
    status: ReportStatus
    reviewed_by: uuid.UUID | None
    action_taken: str | None
    created_at: datetime


class AdminReportListResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    items: list[AdminReportItem]
    total: int
    page: int
    size: int


class AdminReportReviewRequest(_Base):
    status: Literal["reviewed", "actioned", "dismissed"]
    action_taken: str | None = Field(None, max_length=100)
