import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.notifications.constants import NotificationType
from shared.database.postgres import Base


class Notification(Base):
    __tablename__ = "notifications"

    notification_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(), primary_key=True, default=uuid.uuid4
    )
    recipient_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(), nullable=False)
    # Actor who performed the action (nullable for system events)
    sender_id: Mapped[uuid.UUID | None] = mapped_column(sa.Uuid(), nullable=True)
    type: Mapped[NotificationType] = mapped_column(
        sa.Enum(
            NotificationType,
            name="notificationtype",
            native_enum=False,
            length=30,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    post_id: Mapped[uuid.UUID | None] = mapped_column(sa.Uuid(), nullable=True)
    comment_id: Mapped[uuid.UUID | None] = mapped_column(sa.Uuid(), nullable=True)
    # Free-form payload for clients (snippet, report outcome, ...)
    context: Mapped[dict | None] = mapped_column(
        sa.JSON().with_variant(JSONB(), "postgresql"), nullable=True
    )
    is_read: Mapped[bool] = mapped_column(
        sa.Boolean(), nullable=False, default=False, server_default=sa.false()
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        sa.Index("ix_notifications_recipient_created_at", "recipient_id", "created_at"),
        sa.Index("ix_notifications_recipient_is_read", "recipient_id", "is_read"),
    )
