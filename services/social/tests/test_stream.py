import asyncio
import json
import uuid

import pytest

from app.notifications.broker import NotificationBroker, StreamEvent
from app.notifications.stream import notification_stream


async def _next(stream) -> dict:
    return json.loads(await asyncio.wait_for(stream.__anext__(), timeout=1))


@pytest.mark.asyncio
async def test_stream_starts_with_connected_and_relays_events() -> None:
    broker = NotificationBroker()
    user_id = uuid.uuid4()
    stream = notification_stream(broker, user_id, unread_count=3, keepalive_seconds=5)

    connected = await _next(stream)
    assert connected["type"] == "connected"
    assert connected["payload"]["unread_count"] == 3
    assert broker.channel_count(user_id) == 1

    broker.publish(user_id, StreamEvent("notification", {"id": "n1"}))
    assert await _next(stream) == {"type": "notification", "payload": {"id": "n1"}}

    await stream.aclose()
    assert broker.channel_count(user_id) == 0


@pytest.mark.asyncio
async def test_idle_stream_emits_keepalive() -> None:
    broker = NotificationBroker()
    stream = notification_stream(broker, uuid.uuid4(), unread_count=0, keepalive_seconds=0.01)

    await _next(stream)
    assert (await _next(stream))["type"] == "keepalive"
    await stream.aclose()


@pytest.mark.asyncio
async def test_broker_shutdown_ends_stream() -> None:
    broker = NotificationBroker()
    user_id = uuid.uuid4()
    stream = notification_stream(broker, user_id, unread_count=0, keepalive_seconds=5)
    await _next(stream)

    pending = asyncio.ensure_future(stream.__anext__())
    await asyncio.sleep(0)
    broker.close()

    with pytest.raises(StopAsyncIteration):
        await asyncio.wait_for(pending, timeout=1)
    assert broker.channel_count() == 0
