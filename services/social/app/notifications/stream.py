"""
Live notification stream.

Each line is one JSON object ``{"type": ..., "payload": ...}``.  The first line
is always ``connected`` with the current unread count, so a client that missed
events while offline can refetch; after that the stream carries whatever the
broker delivers to the recipient, plus a ``keepalive`` line whenever the
channel has been idle for ``keepalive_seconds``.

The stream ends when the broker closes the channel (server shutdown) or the
client disconnects; either way the channel is unregistered.
"""
from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from uuid import UUID

from app.notifications.broker import NotificationBroker, StreamEvent
from app.notifications.constants import STREAM_CONNECTED, STREAM_KEEPALIVE

logger = logging.getLogger(__name__)

MEDIA_TYPE = "application/x-ndjson"


def encode(event: StreamEvent) -> str:
    return json.dumps({"type": event.type, "payload": event.payload}, default=str) + "\n"


async def notification_stream(
    broker: NotificationBroker,
    recipient_id: UUID,
    *,
    unread_count: int,
    keepalive_seconds: float,
) -> AsyncIterator[str]:
    channel = broker.subscribe(recipient_id)
    logger.info("stream opened for %s (channel %s)", recipient_id, channel.id)
    try:
        yield encode(
            StreamEvent(
                STREAM_CONNECTED,
                {"channel_id": str(channel.id), "unread_count": unread_count},
            )
        )
        while True:
            try:
                event = await asyncio.wait_for(channel.receive(), timeout=keepalive_seconds)
            except asyncio.TimeoutError:
                yield encode(StreamEvent(STREAM_KEEPALIVE))
                continue
            if event is None:
                break
            yield encode(event)
    finally:
        broker.unsubscribe(channel)
        logger.info("stream closed for %s (channel %s)", recipient_id, channel.id)
