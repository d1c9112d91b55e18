"""
Accounts — read-only view of the identity service's user table.

This service never creates accounts.  The only columns it writes are
``status`` and ``verified`` (moderation decisions), and even those go through
app.moderation so the status cache is invalidated.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.accounts.constants import AccountStatus
from shared.database.postgres import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(), primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(sa.String(50), nullable=False, unique=True, index=True)
    full_name: Mapped[str | None] = mapped_column(sa.String(200), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(sa.String(500), nullable=True)
    bio: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    is_private: Mapped[bool] = mapped_column(
        sa.Boolean(), nullable=False, default=False, server_default=sa.false()
    )
    status: Mapped[AccountStatus] = mapped_column(
        sa.Enum(
            AccountStatus,
            name="accountstatus",
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=AccountStatus.NORMAL,
    )
    verified: Mapped[bool] = mapped_column(
        sa.Boolean(), nullable=False, default=False, server_default=sa.false()
    )
    # {"like": false, "comment": true, ...}; missing keys mean enabled
    notification_preferences: Mapped[dict | None] = mapped_column(
        sa.JSON().with_variant(JSONB(), "postgresql"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )
