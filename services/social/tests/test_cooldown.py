import asyncio
import uuid

import pytest
import sqlalchemy as sa
from redis.exceptions import ConnectionError as RedisConnectionError

from app.exceptions import ActionBlocked, AlreadyFollowing, FollowCooldownActive
from app.social_graph import controller as ctrl
from app.social_graph.constants import FollowState
from app.social_graph.cooldown import FollowCooldown
from app.social_graph.models import Follow
from app.social_graph.schemas import FollowActionResponse


class FakeRedis:
    """Just enough of redis.asyncio.Redis for SET NX EX."""

    def __init__(self) -> None:
        self.store: dict[str, tuple[str, int]] = {}

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.store:
            return None
        self.store[key] = (value, ex)
        return True


class BrokenRedis:
    async def set(self, *args, **kwargs):
        raise RedisConnectionError("connection refused")


@pytest.mark.asyncio
async def test_second_attempt_inside_window_is_refused() -> None:
    redis = FakeRedis()
    cooldown = FollowCooldown(redis, 5)
    a, b = uuid.uuid4(), uuid.uuid4()

    assert await cooldown.try_acquire(a, b) is True
    assert await cooldown.try_acquire(a, b) is False
    assert await cooldown.try_acquire(b, a) is True
    assert redis.store[f"follow:cooldown:{a}:{b}"] == ("1", 5)


@pytest.mark.asyncio
async def test_redis_outage_lets_the_follow_through() -> None:
    cooldown = FollowCooldown(BrokenRedis(), 5)
    assert await cooldown.try_acquire(uuid.uuid4(), uuid.uuid4()) is True


@pytest.mark.asyncio
async def test_controller_enforces_cooldown(db_session, runtime, make_account) -> None:
    runtime.cooldown = FollowCooldown(FakeRedis(), 5)
    alice = await make_account()
    bob = await make_account()

    await ctrl.request_follow(db_session, runtime, alice.id, bob.id)
    await ctrl.unfollow(db_session, runtime, alice.id, bob.id)

    with pytest.raises(FollowCooldownActive) as exc_info:
        await ctrl.request_follow(db_session, runtime, alice.id, bob.id)
    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_duplicate_request_is_a_conflict_not_a_cooldown(
    session_factory, runtime, make_account
) -> None:
    runtime.cooldown = FollowCooldown(FakeRedis(), 5)
    alice = await make_account("alice")
    bob = await make_account("bob", is_private=True)

    async def attempt():
        async with session_factory() as session:
            return await ctrl.request_follow(session, runtime, alice.id, bob.id)

    results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)

    assert sum(isinstance(r, FollowActionResponse) for r in results) == 1
    assert sum(isinstance(r, AlreadyFollowing) for r in results) == 1
    async with session_factory() as session:
        edges = (await session.execute(sa.select(Follow))).scalars().all()
        assert len(edges) == 1

    with pytest.raises(AlreadyFollowing) as exc_info:
        await attempt()
    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_rejected_request_leaves_cooldown_untouched(db_session, runtime, make_account) -> None:
    redis = FakeRedis()
    runtime.cooldown = FollowCooldown(redis, 5)
    alice = await make_account()
    bob = await make_account()
    await ctrl.block_user(db_session, runtime, bob.id, alice.id)

    with pytest.raises(ActionBlocked):
        await ctrl.request_follow(db_session, runtime, alice.id, bob.id)
    assert redis.store == {}

    await ctrl.unblock_user(db_session, runtime, bob.id, alice.id)
    result = await ctrl.request_follow(db_session, runtime, alice.id, bob.id)
    assert result.state == FollowState.ACCEPTED
