import asyncio
import uuid

import pytest
import sqlalchemy as sa

from app.exceptions import NotificationNotFound
from app.notifications import delivery, service
from app.notifications.constants import NotificationType
from app.notifications.models import Notification
from app.social_graph import controller as graph_ctrl
from app.social_graph import service as graph_svc
from shared.events import CommentCreated, LikeCreated, MentionDetected, ReportResolved


async def _count(session, recipient_id, type_=None) -> int:
    query = (
        sa.select(sa.func.count())
        .select_from(Notification)
        .where(Notification.recipient_id == recipient_id)
    )
    if type_ is not None:
        query = query.where(Notification.type == type_)
    return (await session.execute(query)).scalar_one()


def _comment(actor, owner, text="nice shot") -> CommentCreated:
    return CommentCreated(
        actor_id=actor.id,
        post_id=uuid.uuid4(),
        post_owner_id=owner.id,
        comment_id=uuid.uuid4(),
        snippet=delivery.snippet(text),
    )


# ── Generator ─────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_comment_notifies_post_owner(db_session, runtime, make_account) -> None:
    owner = await make_account()
    actor = await make_account()

    [record] = await runtime.dispatch(db_session, [_comment(actor, owner)])

    assert record.recipient_id == owner.id
    assert record.sender_id == actor.id
    assert record.type == NotificationType.COMMENT
    assert record.context == {"snippet": "nice shot"}


@pytest.mark.asyncio
async def test_self_action_is_suppressed(db_session, runtime, make_account) -> None:
    owner = await make_account()

    assert await runtime.dispatch(db_session, [_comment(owner, owner)]) == []
    assert await _count(db_session, owner.id) == 0


@pytest.mark.asyncio
async def test_recipient_block_suppresses(db_session, runtime, make_account) -> None:
    owner = await make_account()
    actor = await make_account()
    await graph_svc.block(db_session, owner.id, actor.id)

    assert await runtime.dispatch(db_session, [_comment(actor, owner)]) == []
    assert await _count(db_session, owner.id) == 0


@pytest.mark.asyncio
async def test_preferences_switch_off_optional_types(db_session, runtime, make_account) -> None:
    owner = await make_account(notification_preferences={"comment": False, "follow_request": False})
    actor = await make_account()

    assert await runtime.dispatch(db_session, [_comment(actor, owner)]) == []

    owner.is_private = True
    await db_session.commit()
    await graph_ctrl.request_follow(db_session, runtime, actor.id, owner.id)
    # Relationship notifications ignore preferences.
    assert await _count(db_session, owner.id, NotificationType.FOLLOW_REQUEST) == 1


@pytest.mark.asyncio
async def test_repeated_likes_collapse_while_unread(db_session, runtime, make_account) -> None:
    owner = await make_account()
    actor = await make_account()
    post_id = uuid.uuid4()
    like = LikeCreated(actor_id=actor.id, post_id=post_id, content_owner_id=owner.id)

    first = await runtime.dispatch(db_session, [like])
    second = await runtime.dispatch(db_session, [like])

    assert len(first) == 1
    assert second == []
    assert await _count(db_session, owner.id, NotificationType.LIKE) == 1

    # A like on a comment of the same post is a different target.
    on_comment = LikeCreated(
        actor_id=actor.id, post_id=post_id, content_owner_id=owner.id, comment_id=uuid.uuid4()
    )
    assert len(await runtime.dispatch(db_session, [on_comment])) == 1

    await service.mark_all_read(owner.id, db_session)
    await db_session.commit()
    assert len(await runtime.dispatch(db_session, [like])) == 1
    assert await _count(db_session, owner.id, NotificationType.LIKE) == 3


@pytest.mark.asyncio
async def test_mention_requires_visibility(db_session, runtime, make_account) -> None:
    actor = await make_account()
    public = await make_account()
    private = await make_account(is_private=True)

    events = [
        MentionDetected(actor_id=actor.id, mentioned_id=public.id, snippet="hi @public"),
        MentionDetected(actor_id=actor.id, mentioned_id=private.id, snippet="hi @private"),
    ]
    records = await runtime.dispatch(db_session, events)

    assert [r.recipient_id for r in records] == [public.id]
    assert await _count(db_session, private.id) == 0


@pytest.mark.asyncio
async def test_report_resolution_notifies_reporter(db_session, runtime, make_account) -> None:
    reporter = await make_account()
    event = ReportResolved(
        report_id=uuid.uuid4(), reporter_id=reporter.id, status="actioned", action_taken="removed"
    )

    [record] = await runtime.dispatch(db_session, [event])

    assert record.type == NotificationType.REPORT_RESOLVED
    assert record.sender_id is None
    assert record.context["action_taken"] == "removed"


@pytest.mark.asyncio
async def test_unknown_event_is_rejected(db_session, runtime) -> None:
    with pytest.raises(TypeError):
        await runtime.generator.on_event(db_session, object())


# ── Delivery ordering ─────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_published_notification_is_already_committed(
    db_session, session_factory, runtime, make_account
) -> None:
    owner = await make_account()
    actor = await make_account("carol")
    channel = runtime.broker.subscribe(owner.id)

    await runtime.dispatch(db_session, [_comment(actor, owner)])

    event = await asyncio.wait_for(channel.receive(), timeout=1)
    assert event.type == "notification"
    assert event.payload["sender"]["username"] == "carol"
    async with session_factory() as other:
        stored = await other.get(Notification, uuid.UUID(event.payload["id"]))
        assert stored is not None


@pytest.mark.asyncio
async def test_delivery_does_not_depend_on_listeners(db_session, runtime, make_account) -> None:
    owner = await make_account()
    actor = await make_account()
    channel = runtime.broker.subscribe(owner.id)
    channel.close()

    records = await runtime.dispatch(db_session, [_comment(actor, owner)])

    assert len(records) == 1
    assert await _count(db_session, owner.id) == 1


# ── Read state ────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_mark_read_and_mark_all_read(db_session, runtime, make_account) -> None:
    owner = await make_account()
    stranger = await make_account()
    actor = await make_account()
    records = await runtime.dispatch(
        db_session, [_comment(actor, owner), _comment(actor, owner), _comment(actor, owner)]
    )

    await service.mark_read(owner.id, records[0].notification_id, db_session)
    # Idempotent.
    await service.mark_read(owner.id, records[0].notification_id, db_session)
    assert await service.count_unread(owner.id, db_session) == 2

    with pytest.raises(NotificationNotFound):
        await service.mark_read(stranger.id, records[1].notification_id, db_session)

    assert await service.mark_all_read(owner.id, db_session) == 2
    assert await service.count_unread(owner.id, db_session) == 0


# ── Mentions ──────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("hey @alice and @bob.", ["alice", "bob"]),
        ("@alice @alice @Alice", ["alice", "Alice"]),
        ("mail me at carol@example.com", []),
        ("@@double", []),
        ("no mentions", []),
    ],
)
def test_extract_mentions(text, expected) -> None:
    assert delivery.extract_mentions(text) == expected


def test_snippet_truncates() -> None:
    text = "word " * 100
    result = delivery.snippet(text)
    assert len(result) == 140
    assert result.endswith("…")
    assert delivery.snippet(None) is None
