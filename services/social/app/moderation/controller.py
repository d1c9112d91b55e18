"""
Moderation domain — orchestration.

Every decision commits first and then evicts the account's cached status, so
the response is only sent once no cache entry older than the decision remains.
"""
from __future__ import annotations

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.models import Account
from app.moderation import service as svc
from app.moderation.schemas import (
    AccountStatusResponse,
    BanRequest,
    VerificationQueueItem,
    VerificationQueueResponse,
    VerificationReviewRequest,
    VerificationReviewResponse,
)
from app.runtime import SocialRuntime, commit
from app.social_graph.schemas import SocialUserRef

logger = logging.getLogger(__name__)


async def _settle(session: AsyncSession, runtime: SocialRuntime, account_id: uuid.UUID) -> None:
    await commit(session)
    evicted = runtime.status_cache.invalidate_subject(account_id)
    logger.debug("evicted %d status cache entries for %s", evicted, account_id)


def _status_response(account: Account, message: str) -> AccountStatusResponse:
    return AccountStatusResponse(
        user_id=account.id, status=account.status, verified=account.verified, message=message
    )


async def ban_user(
    session: AsyncSession, runtime: SocialRuntime, account_id: uuid.UUID, body: BanRequest
) -> AccountStatusResponse:
    account = await svc.ban(session, account_id, body.reason)
    await _settle(session, runtime, account_id)
    return _status_response(account, "Account banned.")


async def unban_user(
    session: AsyncSession, runtime: SocialRuntime, account_id: uuid.UUID
) -> AccountStatusResponse:
    account = await svc.unban(session, account_id)
    await _settle(session, runtime, account_id)
    return _status_response(account, "Account reinstated.")


async def revoke_verification(
    session: AsyncSession, runtime: SocialRuntime, account_id: uuid.UUID
) -> AccountStatusResponse:
    account = await svc.revoke_verification(session, account_id)
    await _settle(session, runtime, account_id)
    return _status_response(account, "Verification revoked.")


async def get_queue(session: AsyncSession, page: int, size: int) -> VerificationQueueResponse:
    rows, total = await svc.get_pending_queue(session, page, size)
    items = [
        VerificationQueueItem(
            id=r.request_id,
            user=SocialUserRef.model_validate(a),
            note=r.note,
            created_at=r.created_at,
        )
        for r, a in rows
    ]
    return VerificationQueueResponse(items=items, total=total, page=page, size=size)


async def review_verification(
    session: AsyncSession,
    runtime: SocialRuntime,
    request_id: uuid.UUID,
    reviewer_id: uuid.UUID,
    body: VerificationReviewRequest,
) -> VerificationReviewResponse:
    approve = body.action == "approve"
    request = await svc.review_verification(
        session, request_id, reviewer_id, approve=approve, notes=body.notes
    )
    await _settle(session, runtime, request.account_id)
    return VerificationReviewResponse(
        id=request.request_id,
        account_id=request.account_id,
        status=request.status,
        reviewed_at=request.reviewed_at,
        message="Verification approved." if approve else "Verification rejected.",
    )
