"""
Verification domain — pure business logic (zero FastAPI imports).

Transaction contract: these functions only flush(); the caller commits.
"""
from __future__ import annotations

import logging
import uuid

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.constants import AccountStatus
from app.accounts.service import require_account
from app.exceptions import AlreadyVerified, VerificationAlreadyPending
from app.verification.constants import VerificationRequestStatus
from app.verification.models import VerificationRequest
from app.verification.schemas import BanStatusResponse, VerificationStatusResponse

logger = logging.getLogger(__name__)


async def latest_request(
    session: AsyncSession, account_id: uuid.UUID
) -> VerificationRequest | None:
    result = await session.execute(
        sa.select(VerificationRequest)
        .where(VerificationRequest.account_id == account_id)
        .order_by(VerificationRequest.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def submit_request(
    session: AsyncSession, account_id: uuid.UUID, note: str | None
) -> VerificationRequest:
    account = await require_account(session, account_id)
    if account.verified:
        raise AlreadyVerified()
    latest = await latest_request(session, account_id)
    if latest is not None and latest.status == VerificationRequestStatus.PENDING:
        raise VerificationAlreadyPending()
    request = VerificationRequest(account_id=account_id, note=note)
    session.add(request)
    await session.flush()
    logger.info("verification requested by %s", account_id)
    return request


async def compute_verification_status(
    session: AsyncSession, account_id: uuid.UUID
) -> VerificationStatusResponse:
    """Uncached read; callers go through the status cache."""
    account = await require_account(session, account_id)
    latest = await latest_request(session, account_id)
    return VerificationStatusResponse(
        has_request=latest is not None,
        status=latest.status if latest is not None else None,
        is_verified=account.verified,
    )


async def compute_ban_status(
    session: AsyncSession, account_id: uuid.UUID
) -> BanStatusResponse:
    account = await require_account(session, account_id)
    return BanStatusResponse(
        user_id=account.id,
        status=account.status,
        is_banned=account.status == AccountStatus.BANNED,
    )
