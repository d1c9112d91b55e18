"""
Social graph domain — SQLAlchemy ORM models.

Tables:
  follows  — directed follow edges (follower → following) with approval state
  blocks   — block edges (blocker blocks blocked)
  reports  — user / content reports submitted for moderator review

The unique pair constraints are the concurrency guard for the follow state
machine: a racing second insert for the same ordered pair fails with an
IntegrityError instead of producing a second row.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from app.social_graph.constants import FollowState, ReportStatus, ReportTargetType
from shared.database.postgres import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _str_enum(enum_cls: type, name: str) -> sa.Enum:
    return sa.Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=20,
        values_callable=lambda e: [m.value for m in e],
    )


class Follow(Base):
    __tablename__ = "follows"

    follow_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(), primary_key=True, default=uuid.uuid4)
    follower_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(),
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    following_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(),
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    state: Mapped[FollowState] = mapped_column(
        _str_enum(FollowState, "followstate"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )

    __table_args__ = (
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
        sa.CheckConstraint("follower_id != following_id", name="ck_follows_no_self"),
        sa.Index("idx_follows_follower_state", "follower_id", "state"),
        sa.Index("idx_follows_following_state", "following_id", "state"),
    )


class Block(Base):
    __tablename__ = "blocks"

    block_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(), primary_key=True, default=uuid.uuid4)
    blocker_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(),
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    blocked_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(),
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )

    __table_args__ = (
        sa.UniqueConstraint("blocker_id", "blocked_id", name="uq_blocks_pair"),
        sa.CheckConstraint("blocker_id != blocked_id", name="ck_blocks_no_self"),
        sa.Index("idx_blocks_blocker_id", "blocker_id"),
        sa.Index("idx_blocks_blocked_id", "blocked_id"),
    )


class Report(Base):
    __tablename__ = "reports"

    report_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(), primary_key=True, default=uuid.uuid4)
    reporter_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(),
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    target_type: Mapped[ReportTargetType] = mapped_column(
        _str_enum(ReportTargetType, "reporttargettype"), nullable=False
    )
    target_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(), nullable=False)
    reason: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    status: Mapped[ReportStatus] = mapped_column(
        _str_enum(ReportStatus, "reportstatus"),
        nullable=False,
        default=ReportStatus.OPEN,
    )
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(sa.Uuid(), nullable=True)
    action_taken: Mapped[str | None] = mapped_column(sa.String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )

    __table_args__ = (
        sa.Index("idx_reports_reporter_id", "reporter_id"),
        sa.Index("idx_reports_status", "status"),
        sa.Index("idx_reports_target", "target_type", "target_id"),
    )
