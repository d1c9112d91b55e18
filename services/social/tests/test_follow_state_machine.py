import asyncio

import pytest
import sqlalchemy as sa

from app.accounts.constants import AccountStatus
from app.exceptions import (
    ActionBlocked,
    AlreadyFollowing,
    CannotBlockSelf,
    CannotFollowSelf,
    FollowRequestNotFound,
    NotFollowing,
    UserHidden,
)
from app.notifications.constants import NotificationType
from app.notifications.models import Notification
from app.social_graph import controller as ctrl
from app.social_graph import store
from app.social_graph.constants import FollowState
from app.social_graph.models import Follow
from app.social_graph.schemas import FollowActionResponse


async def _notifications(session, recipient_id, type_=None) -> list[Notification]:
    query = sa.select(Notification).where(Notification.recipient_id == recipient_id)
    if type_ is not None:
        query = query.where(Notification.type == type_)
    return list((await session.execute(query)).scalars().all())


@pytest.mark.asyncio
async def test_follow_public_account_is_accepted_immediately(db_session, runtime, make_account) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob")

    result = await ctrl.request_follow(db_session, runtime, alice.id, bob.id)

    assert result.state == FollowState.ACCEPTED
    edge = await store.find_follow_edge(db_session, alice.id, bob.id)
    assert edge.state == FollowState.ACCEPTED
    [accept] = await _notifications(db_session, alice.id)
    assert accept.type == NotificationType.FOLLOW_ACCEPT
    assert accept.context == {"auto": True}
    [new_follower] = await _notifications(db_session, bob.id)
    assert new_follower.type == NotificationType.NEW_FOLLOWER
    assert new_follower.sender_id == alice.id


@pytest.mark.asyncio
async def test_follow_private_account_creates_pending_request(db_session, runtime, make_account) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob", is_private=True)

    result = await ctrl.request_follow(db_session, runtime, alice.id, bob.id)

    assert result.state == FollowState.PENDING
    [request] = await _notifications(db_session, bob.id)
    assert request.type == NotificationType.FOLLOW_REQUEST
    assert request.sender_id == alice.id
    assert await _notifications(db_session, alice.id) == []
    assert await store.count_pending(db_session, bob.id) == 1


@pytest.mark.asyncio
async def test_follow_rejections(db_session, runtime, make_account) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob")
    banned = await make_account("banned", status=AccountStatus.BANNED)

    with pytest.raises(CannotFollowSelf):
        await ctrl.request_follow(db_session, runtime, alice.id, alice.id)
    with pytest.raises(UserHidden):
        await ctrl.request_follow(db_session, runtime, alice.id, banned.id)

    await ctrl.request_follow(db_session, runtime, alice.id, bob.id)
    with pytest.raises(AlreadyFollowing):
        await ctrl.request_follow(db_session, runtime, alice.id, bob.id)


@pytest.mark.asyncio
async def test_follow_across_block_is_forbidden_both_ways(db_session, runtime, make_account) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob")
    await ctrl.block_user(db_session, runtime, bob.id, alice.id)

    with pytest.raises(ActionBlocked):
        await ctrl.request_follow(db_session, runtime, alice.id, bob.id)
    with pytest.raises(ActionBlocked):
        await ctrl.request_follow(db_session, runtime, bob.id, alice.id)
    with pytest.raises(CannotBlockSelf):
        await ctrl.block_user(db_session, runtime, bob.id, bob.id)


@pytest.mark.asyncio
async def test_concurrent_requests_yield_one_edge(session_factory, runtime, make_account) -> None:
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
        requests = await _notifications(session, bob.id, NotificationType.FOLLOW_REQUEST)
        assert len(requests) == 1
    assert len(runtime.locks) == 0


@pytest.mark.asyncio
async def test_approve_notifies_requester_once(db_session, runtime, make_account) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob", is_private=True)
    await ctrl.request_follow(db_session, runtime, alice.id, bob.id)
    channel = runtime.broker.subscribe(alice.id)

    result = await ctrl.approve_follow(db_session, runtime, bob.id, alice.id)

    assert result.state == FollowState.ACCEPTED
    [accept] = await _notifications(db_session, alice.id)
    assert accept.type == NotificationType.FOLLOW_ACCEPT
    assert accept.sender_id == bob.id

    # The requester learns about the approval on the open stream.
    event = await asyncio.wait_for(channel.receive(), timeout=1)
    assert event.type == "notification"
    assert event.payload["type"] == "follow_accept"
    assert event.payload["id"] == str(accept.notification_id)
    assert event.payload["sender"]["username"] == "bob"

    [request] = await _notifications(db_session, bob.id, NotificationType.FOLLOW_REQUEST)
    assert request.is_read is True

    with pytest.raises(FollowRequestNotFound):
        await ctrl.approve_follow(db_session, runtime, bob.id, alice.id)
    assert len(await _notifications(db_session, alice.id)) == 1


@pytest.mark.asyncio
async def test_decline_removes_edge_and_pushes_transient_event(db_session, runtime, make_account) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob", is_private=True)
    await ctrl.request_follow(db_session, runtime, alice.id, bob.id)
    channel = runtime.broker.subscribe(alice.id)

    result = await ctrl.decline_follow(db_session, runtime, bob.id, alice.id)

    assert result.state is None
    assert await store.find_follow_edge(db_session, alice.id, bob.id) is None
    assert await _notifications(db_session, alice.id) == []
    event = await asyncio.wait_for(channel.receive(), timeout=1)
    assert event.type == "follow_declined"
    assert event.payload == {"user_id": str(bob.id)}

    # A declined requester may ask again.
    again = await ctrl.request_follow(db_session, runtime, alice.id, bob.id)
    assert again.state == FollowState.PENDING


@pytest.mark.asyncio
async def test_cancel_pending_request(db_session, runtime, make_account) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob", is_private=True)
    await ctrl.request_follow(db_session, runtime, alice.id, bob.id)
    channel = runtime.broker.subscribe(bob.id)

    await ctrl.cancel_follow(db_session, runtime, alice.id, bob.id)

    assert await store.count_pending(db_session, bob.id) == 0
    [request] = await _notifications(db_session, bob.id, NotificationType.FOLLOW_REQUEST)
    assert request.is_read is True
    event = await asyncio.wait_for(channel.receive(), timeout=1)
    assert event.type == "follow_cancelled"

    with pytest.raises(FollowRequestNotFound):
        await ctrl.cancel_follow(db_session, runtime, alice.id, bob.id)


@pytest.mark.asyncio
async def test_unfollow_requires_accepted_edge(db_session, runtime, make_account) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob", is_private=True)
    await ctrl.request_follow(db_session, runtime, alice.id, bob.id)

    with pytest.raises(NotFollowing):
        await ctrl.unfollow(db_session, runtime, alice.id, bob.id)

    await ctrl.approve_follow(db_session, runtime, bob.id, alice.id)
    await ctrl.unfollow(db_session, runtime, alice.id, bob.id)
    assert await store.find_follow_edge(db_session, alice.id, bob.id) is None


@pytest.mark.asyncio
async def test_block_removes_follow_edges_both_ways(db_session, runtime, make_account) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob", is_private=True)
    await ctrl.request_follow(db_session, runtime, bob.id, alice.id)
    await ctrl.request_follow(db_session, runtime, alice.id, bob.id)

    await ctrl.block_user(db_session, runtime, bob.id, alice.id)

    assert await store.find_follow_edge(db_session, alice.id, bob.id) is None
    assert await store.find_follow_edge(db_session, bob.id, alice.id) is None
    assert await store.count_pending(db_session, bob.id) == 0
    assert await store.block_exists(db_session, bob.id, alice.id)
    assert not await store.block_exists(db_session, alice.id, bob.id)


@pytest.mark.asyncio
async def test_follow_status_reports_both_directions(db_session, runtime, make_account) -> None:
    alice = await make_account("alice")
    bob = await make_account("bob", is_private=True)
    await ctrl.request_follow(db_session, runtime, bob.id, alice.id)
    await ctrl.request_follow(db_session, runtime, alice.id, bob.id)

    status = await ctrl.follow_status(db_session, alice.id, bob.id)

    assert status.state == FollowState.PENDING
    assert status.has_pending_request is True
    assert status.is_following is False
    assert status.is_followed_by is True
