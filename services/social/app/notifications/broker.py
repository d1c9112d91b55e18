"""
In-process fan-out broker.

A registry of open delivery channels keyed by recipient (or any hashable
topic).  ``publish`` pushes an event to every channel currently registered
under the key: best effort, at most once per channel, no replay.  A channel
that subscribes after an event was published never sees it; clients fetch
unread state on connect.

Registry mutations are plain synchronous code with no await points, so on the
event loop a publish always sees a channel either fully registered or not at
all.  The registry lives in process memory only: a restart drops every
channel, and several worker processes would each hold their own registry.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreamEvent:
    type: str
    payload: dict[str, Any] = field(default_factory=dict)


# Wakes a reader blocked on a channel that was closed underneath it.
_CLOSED = StreamEvent(type="__closed__")


class DeliveryChannel:
    """One open real-time connection's inbox."""

    def __init__(self, key: Hashable, max_pending: int) -> None:
        self.id = uuid.uuid4()
        self.key = key
        self.closed = False
        self._queue: asyncio.Queue[StreamEvent] = asyncio.Queue(maxsize=max_pending)

    def offer(self, event: StreamEvent) -> bool:
        if self.closed:
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning("channel %s full, dropping %s", self.id, event.type)
            return False
        return True

    async def receive(self) -> StreamEvent | None:
        """Next event, or None once the channel is closed."""
        if self.closed and self._queue.empty():
            return None
        event = await self._queue.get()
        return None if event is _CLOSED else event

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            self._queue.get_nowait()
            self._queue.put_nowait(_CLOSED)


class NotificationBroker:
    def __init__(self, *, max_pending: int = 100) -> None:
        self.max_pending = max_pending
        self._channels: dict[Hashable, set[DeliveryChannel]] = {}

    def subscribe(self, key: Hashable) -> DeliveryChannel:
        channel = DeliveryChannel(key, self.max_pending)
        self._channels.setdefault(key, set()).add(channel)
        logger.debug("channel %s subscribed to %s", channel.id, key)
        return channel

    def unsubscribe(self, channel: DeliveryChannel) -> None:
        channel.close()
        members = self._channels.get(channel.key)
        if members is None:
            return
        members.discard(channel)
        if not members:
            del self._channels[channel.key]
        logger.debug("channel %s unsubscribed from %s", channel.id, channel.key)

    def publish(self, key: Hashable, event: StreamEvent) -> int:
        """Offer ``event`` to every open channel for ``key``.

        Returns how many channels accepted it.  Closed or full channels are
        skipped; delivery to the others continues.
        """
        delivered = 0
        for channel in tuple(self._channels.get(key, ())):
            if channel.offer(event):
                delivered += 1
            elif channel.closed:
                logger.debug("dropped %s for closed channel %s", event.type, channel.id)
        return delivered

    def channel_count(self, key: Hashable | None = None) -> int:
        if key is not None:
            return len(self._channels.get(key, ()))
        return sum(len(members) for members in self._channels.values())

    def close(self) -> None:
        """Close every channel; open streams end on their next read."""
        for members in list(self._channels.values()):
            for channel in list(members):
                channel.close()
        self._channels.clear()
