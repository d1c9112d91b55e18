"""Initial social schema: accounts, follows, blocks, reports, notifications,
verification requests

Revision ID: 001
Revises:
Create Date: 2026-10-17

Tables created:
  - accounts               Read model of identity accounts (status, privacy, verified)
  - follows                Directed follow edges with PENDING / ACCEPTED state
  - blocks                 Block edges (blocker blocks blocked)
  - reports                User/content reports submitted for staff review
  - notifications          Durable notification records
  - verification_requests  Verification requests and their review

Enums are stored as VARCHAR with CHECK constraints (non-native), so adding a
value later never needs ALTER TYPE.
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False, length=30)


def _uuid() -> postgresql.UUID:
    return postgresql.UUID(as_uuid=True)


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("NOW()"),
    )


# ─────────────────────────────────────────────────────────────────────────────
#  UPGRADE
# ─────────────────────────────────────────────────────────────────────────────

def upgrade() -> None:
    # ── 1. accounts ───────────────────────────────────────────────────────────
    op.create_table(
        "accounts",
        sa.Column("id", _uuid(), nullable=False, server_default=sa.text("gen_random_uuid()")),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("full_name", sa.String(200), nullable=True),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "status",
            _enum("accountstatus", "normal", "banned", "suspended", "deactivated"),
            nullable=False,
            server_default="normal",
        ),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notification_preferences", postgresql.JSONB(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_accounts"),
        sa.UniqueConstraint("username", name="uq_accounts_username"),
    )
    op.create_index("ix_accounts_username", "accounts", ["username"])

    # ── 2. follows ────────────────────────────────────────────────────────────
    op.create_table(
        "follows",
        sa.Column(
            "follow_id", _uuid(), nullable=False, server_default=sa.text("gen_random_uuid()")
        ),
        sa.Column("follower_id", _uuid(), nullable=False),
        sa.Column("following_id", _uuid(), nullable=False),
        sa.Column("state", _enum("followstate", "pending", "accepted"), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("follow_id", name="pk_follows"),
        sa.ForeignKeyConstraint(
            ["follower_id"], ["accounts.id"], ondelete="CASCADE", name="fk_follows_follower_id"
        ),
        sa.ForeignKeyConstraint(
            ["following_id"], ["accounts.id"], ondelete="CASCADE", name="fk_follows_following_id"
        ),
        # One edge per ordered pair: the cross-process guard for concurrent requests.
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
        sa.CheckConstraint("follower_id != following_id", name="ck_follows_no_self"),
    )
    op.create_index("idx_follows_follower_state", "follows", ["follower_id", "state"])
    op.create_index("idx_follows_following_state", "follows", ["following_id", "state"])

    # ── 3. blocks ─────────────────────────────────────────────────────────────
    op.create_table(
        "blocks",
        sa.Column(
            "block_id", _uuid(), nullable=False, server_default=sa.text("gen_random_uuid()")
        ),
        sa.Column("blocker_id", _uuid(), nullable=False),
        sa.Column("blocked_id", _uuid(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("block_id", name="pk_blocks"),
        sa.ForeignKeyConstraint(
            ["blocker_id"], ["accounts.id"], ondelete="CASCADE", name="fk_blocks_blocker_id"
        ),
        sa.ForeignKeyConstraint(
            ["blocked_id"], ["accounts.id"], ondelete="CASCADE", name="fk_blocks_blocked_id"
        ),
        sa.UniqueConstraint("blocker_id", "blocked_id", name="uq_blocks_pair"),
        sa.CheckConstraint("blocker_id != blocked_id", name="ck_blocks_no_self"),
    )
    op.create_index("idx_blocks_blocker_id", "blocks", ["blocker_id"])
    op.create_index("idx_blocks_blocked_id", "blocks", ["blocked_id"])

    # ── 4. reports ────────────────────────────────────────────────────────────
    op.create_table(
        "reports",
        sa.Column(
            "report_id", _uuid(), nullable=False, server_default=sa.text("gen_random_uuid()")
        ),
        sa.Column("reporter_id", _uuid(), nullable=False),
        sa.Column(
            "target_type",
            _enum("reporttargettype", "user", "post", "reel", "story", "comment"),
            nullable=False,
        ),
        sa.Column("target_id", _uuid(), nullable=False),
        sa.Column("reason", sa.String(255), nullable=False),
        sa.Column(
            "status",
            _enum("reportstatus", "open", "reviewed", "actioned", "dismissed"),
            nullable=False,
            server_default="open",
        ),
        sa.Column("reviewed_by", _uuid(), nullable=True),
        sa.Column("action_taken", sa.String(100), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("report_id", name="pk_reports"),
        sa.ForeignKeyConstraint(
            ["reporter_id"], ["accounts.id"], ondelete="CASCADE", name="fk_reports_reporter_id"
        ),
    )
    op.create_index("idx_reports_reporter_id", "reports", ["reporter_id"])
    op.create_index("idx_reports_status", "reports", ["status"])
    op.create_index("idx_reports_target", "reports", ["target_type", "target_id"])

    # ── 5. notifications ──────────────────────────────────────────────────────
    op.create_table(
        "notifications",
        sa.Column(
            "notification_id",
            _uuid(),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("recipient_id", _uuid(), nullable=False),
        sa.Column("sender_id", _uuid(), nullable=True),
        sa.Column(
            "type",
            _enum(
                "notificationtype",
                "follow_request",
                "follow_accept",
                "new_follower",
                "comment",
                "like",
                "mention",
                "report_resolved",
            ),
            nullable=False,
        ),
        sa.Column("post_id", _uuid(), nullable=True),
        sa.Column("comment_id", _uuid(), nullable=True),
        sa.Column("context", postgresql.JSONB(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        sa.PrimaryKeyConstraint("notification_id", name="pk_notifications"),
    )
    op.create_index(
        "ix_notifications_recipient_created_at", "notifications", ["recipient_id", "created_at"]
    )
    op.create_index(
        "ix_notifications_recipient_is_read", "notifications", ["recipient_id", "is_read"]
    )

    # ── 6. verification_requests ──────────────────────────────────────────────
    op.create_table(
        "verification_requests",
        sa.Column(
            "request_id", _uuid(), nullable=False, server_default=sa.text("gen_random_uuid()")
        ),
        sa.Column("account_id", _uuid(), nullable=False),
        sa.Column(
            "status",
            _enum("verificationrequeststatus", "pending", "approved", "rejected"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("reviewed_by", _uuid(), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("request_id", name="pk_verification_requests"),
        sa.ForeignKeyConstraint(
            ["account_id"],
            ["accounts.id"],
            ondelete="CASCADE",
            name="fk_verification_requests_account_id",
        ),
    )
    op.create_index(
        "ix_verification_requests_account_id", "verification_requests", ["account_id"]
    )


# ─────────────────────────────────────────────────────────────────────────────
#  DOWNGRADE
# ─────────────────────────────────────────────────────────────────────────────

def downgrade() -> None:
    op.drop_index("ix_verification_requests_account_id", table_name="verification_requests")
    op.drop_table("verification_requests")

    op.drop_index("ix_notifications_recipient_is_read", table_name="notifications")
    op.drop_index("ix_notifications_recipient_created_at", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("idx_reports_target", table_name="reports")
    op.drop_index("idx_reports_status", table_name="reports")
    op.drop_index("idx_reports_reporter_id", table_name="reports")
    op.drop_table("reports")

    op.drop_index("idx_blocks_blocked_id", table_name="blocks")
    op.drop_index("idx_blocks_blocker_id", table_name="blocks")
    op.drop_table("blocks")

    op.drop_index("idx_follows_following_state", table_name="follows")
    op.drop_index("idx_follows_follower_state", table_name="follows")
    op.drop_table("follows")

    op.drop_index("ix_accounts_username", table_name="accounts")
    op.drop_table("accounts")
