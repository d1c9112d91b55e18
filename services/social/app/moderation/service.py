"""
Moderation domain — staff decisions that change an account's derived status.

  ban       NORMAL/SUSPENDED/... → BANNED
  unban     BANNED               → NORMAL
  approve   VerificationRequest PENDING → APPROVED, Account.verified = True
  reject    VerificationRequest PENDING → REJECTED

These functions only flush().  The controller commits and then evicts the
account's status cache keys before answering, so no later read can hit a
value cached before the decision.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.constants import AccountStatus
from app.accounts.models import Account
from app.accounts.service import require_account
from app.exceptions import (
    AlreadyBanned,
    NotBanned,
    VerificationNotPending,
    VerificationRequestNotFound,
)
from app.verification.constants import VerificationRequestStatus
from app.verification.models import VerificationRequest

logger = logging.getLogger(__name__)


async def ban(session: AsyncSession, account_id: uuid.UUID, reason: str | None) -> Account:
    account = await require_account(session, account_id)
    if account.status == AccountStatus.BANNED:
        raise AlreadyBanned()
    account.status = AccountStatus.BANNED
    await session.flush()
    logger.info("account %s banned: %s", account_id, reason or "-")
    return account


async def unban(session: AsyncSession, account_id: uuid.UUID) -> Account:
    account = await require_account(session, account_id)
    if account.status != AccountStatus.BANNED:
        raise NotBanned()
    account.status = AccountStatus.NORMAL
    await session.flush()
    logger.info("account %s unbanned", account_id)
    return account


async def get_pending_queue(
    session: AsyncSession, page: int, size: int
) -> tuple[list[tuple[VerificationRequest, Account]], int]:
    """PENDING requests oldest-first (FIFO review queue)."""
    total_r = await session.execute(
        sa.select(sa.func.count())
        .select_from(VerificationRequest)
        .where(VerificationRequest.status == VerificationRequestStatus.PENDING)
    )
    total = total_r.scalar_one()
    rows_r = await session.execute(
        sa.select(VerificationRequest, Account)
        .join(Account, Account.id == VerificationRequest.account_id)
        .where(VerificationRequest.status == VerificationRequestStatus.PENDING)
        .order_by(VerificationRequest.created_at.asc())
        .limit(size)
        .offset((page - 1) * size)
    )
    return [(r, a) for r, a in rows_r.all()], total


async def _pending_request(session: AsyncSession, request_id: uuid.UUID) -> VerificationRequest:
    request = await session.get(VerificationRequest, request_id)
    if request is None:
        raise VerificationRequestNotFound()
    if request.status != VerificationRequestStatus.PENDING:
        raise VerificationNotPending()
    return request


async def review_verification(
    session: AsyncSession,
    request_id: uuid.UUID,
    reviewer_id: uuid.UUID,
    *,
    approve: bool,
    notes: str | None,
) -> VerificationRequest:
    request = await _pending_request(session, request_id)
    account = await require_account(session, request.account_id)
    request.status = (
        VerificationRequestStatus.APPROVED if approve else VerificationRequestStatus.REJECTED
    )
    request.reviewed_by = reviewer_id
    request.review_notes = notes
    request.reviewed_at = datetime.now(timezone.utc)
    if approve:
        account.verified = True
    await session.flush()
    logger.info(
        "verification %s for %s %s by %s",
        request_id, account.id, request.status.value, reviewer_id,
    )
    return request


async def revoke_verification(session: AsyncSession, account_id: uuid.UUID) -> Account:
    account = await require_account(session, account_id)
    account.verified = False
    await session.flush()
    logger.info("verification revoked for %s", account_id)
    return account
