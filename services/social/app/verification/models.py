"""
Social service — SQLAlchemy ORM models for the verification domain.

Tables owned by this module:
  - verification_requests   User request + staff review record
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from app.verification.constants import VerificationRequestStatus
from shared.database.postgres import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class VerificationRequest(Base):
    """
    A single verification request by an account.

    State machine:
      PENDING  →  APPROVED  (staff approves; Account.verified = True)
      PENDING  →  REJECTED  (staff rejects; the account may request again)

    At most one PENDING row per account is enforced in the service layer.
    """

    __tablename__ = "verification_requests"

    request_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(), primary_key=True, default=uuid.uuid4
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(),
        sa.ForeignKey("accounts.id", ondelete="CASCADE", name="fk_verification_requests_account_id"),
        nullable=False,
        index=True,
    )
    status: Mapped[VerificationRequestStatus] = mapped_column(
        sa.Enum(
            VerificationRequestStatus,
            name="verificationrequeststatus",
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=VerificationRequestStatus.PENDING,
    )
    note: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(sa.Uuid(), nullable=True)
    review_notes: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now
    )
