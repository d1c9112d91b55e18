from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import timedelta
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401 - register with Base
from app.accounts.models import Account
from app.database import set_session_factory
from app.main import app
from app.notifications.broker import NotificationBroker
from app.notifications.generator import NotificationGenerator
from app.runtime import SocialRuntime
from app.status_cache import StatusCache
from shared.auth.config import AuthSettings
from shared.constants import Role
from shared.database.postgres import Base, session_factory_for

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return session_factory_for(engine)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def runtime() -> SocialRuntime:
    return SocialRuntime(
        broker=NotificationBroker(max_pending=10),
        status_cache=StatusCache(30.0),
        generator=NotificationGenerator(like_dedup_window=timedelta(hours=1)),
        stream_keepalive_seconds=0.05,
    )


@pytest_asyncio.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession], runtime: SocialRuntime
) -> AsyncGenerator[AsyncClient, None]:
    set_session_factory(session_factory)
    app.state.runtime = runtime
    app.state.limiter.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_account(
    db_session: AsyncSession,
) -> Callable[..., Awaitable[Account]]:
    counter = iter(range(1, 10_000))

    async def _make(
        username: str | None = None,
        *,
        is_private: bool = False,
        **fields,
    ) -> Account:
        account = Account(
            username=username or f"user{next(counter)}",
            is_private=is_private,
            **fields,
        )
        db_session.add(account)
        await db_session.commit()
        return account

    return _make


def bearer(user_id: UUID, *roles: Role) -> dict[str, str]:
    """Authorization header with a token the shared auth dependency accepts."""
    settings = AuthSettings()
    token = jwt.encode(
        {
            "sub": str(user_id),
            "email": f"{user_id.hex[:8]}@example.com",
            "roles": [r.value for r in roles] or [Role.USER.value],
            "iss": settings.issuer,
            "aud": settings.audience,
        },
        settings.secret,
        algorithm=settings.algorithm,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth() -> Callable[..., dict[str, str]]:
    return bearer
