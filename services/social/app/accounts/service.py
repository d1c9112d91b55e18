from __future__ import annotations

import uuid
from collections.abc import Iterable

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.accounts.models import Account
from app.exceptions import UserNotFound


async def get_account(session: AsyncSession, account_id: uuid.UUID) -> Account | None:
    return await session.get(Account, account_id)


async def require_account(session: AsyncSession, account_id: uuid.UUID) -> Account:
    account = await session.get(Account, account_id)
    if account is None:
        raise UserNotFound()
    return account


async def get_accounts_by_username(
    session: AsyncSession, usernames: Iterable[str]
) -> list[Account]:
    names = {n.lower() for n in usernames}
    if not names:
        return []
    result = await session.execute(
        sa.select(Account).where(sa.func.lower(Account.username).in_(names))
    )
    return list(result.scalars().all())
