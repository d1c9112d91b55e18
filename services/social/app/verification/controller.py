from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.runtime import SocialRuntime, commit
from app.verification import service as svc
from app.verification.constants import CACHE_BAN, CACHE_VERIFICATION
from app.verification.schemas import (
    BanStatusResponse,
    VerificationStatusResponse,
    VerificationSubmitRequest,
    VerificationSubmittedResponse,
)


async def submit(
    session: AsyncSession,
    runtime: SocialRuntime,
    account_id: uuid.UUID,
    body: VerificationSubmitRequest,
) -> VerificationSubmittedResponse:
    request = await svc.submit_request(session, account_id, body.note)
    await commit(session)
    runtime.status_cache.invalidate((account_id, CACHE_VERIFICATION))
    return VerificationSubmittedResponse(
        id=request.request_id, status=request.status, created_at=request.created_at
    )


async def verification_status(
    session: AsyncSession, runtime: SocialRuntime, account_id: uuid.UUID
) -> VerificationStatusResponse:
    return await runtime.status_cache.get(
        (account_id, CACHE_VERIFICATION),
        lambda: svc.compute_verification_status(session, account_id),
    )


async def ban_status(
    session: AsyncSession, runtime: SocialRuntime, account_id: uuid.UUID
) -> BanStatusResponse:
    return await runtime.status_cache.get(
        (account_id, CACHE_BAN),
        lambda: svc.compute_ban_status(session, account_id),
    )
