"""
Process-scoped runtime state for the social service.

One ``SocialRuntime`` is built in the FastAPI lifespan and stored on
``app.state.runtime``; it owns the fan-out broker, the status cache, the
per-pair mutation locks and the optional follow cooldown.  Tests build their
own isolated instances.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import timedelta

from fastapi import Request
from redis.asyncio import Redis
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.exceptions import TransientStoreError
from app.locks import KeyedLocks
from app.notifications import delivery
from app.notifications.broker import NotificationBroker
from app.notifications.generator import NotificationGenerator
from app.notifications.models import Notification
from app.social_graph.cooldown import FollowCooldown
from app.status_cache import StatusCache
from shared.database.redis_client import get_redis_client
from shared.events import DomainEvent

logger = logging.getLogger(__name__)


async def commit(session: AsyncSession) -> None:
    """Commit the unit of work.  Store outages surface as TransientStoreError and
    are never retried here: a retry after an ambiguous commit could duplicate
    notifications."""
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    except DBAPIError as exc:
        await session.rollback()
        logger.warning("commit failed: %s", exc)
        raise TransientStoreError() from exc


class SocialRuntime:
    def __init__(
        self,
        *,
        broker: NotificationBroker,
        status_cache: StatusCache,
        generator: NotificationGenerator,
        stream_keepalive_seconds: float = 25.0,
        cooldown: FollowCooldown | None = None,
        redis: Redis | None = None,
    ) -> None:
        self.broker = broker
        self.status_cache = status_cache
        self.generator = generator
        self.stream_keepalive_seconds = stream_keepalive_seconds
        self.cooldown = cooldown
        self.locks = KeyedLocks()
        self._redis = redis

    @classmethod
    def from_settings(cls, settings: Settings) -> SocialRuntime:
        redis = get_redis_client(settings.redis_url) if settings.redis_url else None
        cooldown = None
        if redis is not None and settings.follow_cooldown_seconds > 0:
            cooldown = FollowCooldown(redis, settings.follow_cooldown_seconds)
        return cls(
            broker=NotificationBroker(max_pending=settings.stream_max_pending),
            status_cache=StatusCache(settings.status_cache_ttl_seconds),
            generator=NotificationGenerator(
                like_dedup_window=timedelta(seconds=settings.like_dedup_window_seconds)
            ),
            stream_keepalive_seconds=settings.stream_keepalive_seconds,
            cooldown=cooldown,
            redis=redis,
        )

    async def dispatch(
        self, session: AsyncSession, events: Iterable[DomainEvent]
    ) -> list[Notification]:
        """Record notifications for ``events``, commit, then fan out.

        Nothing reaches the broker unless the commit succeeded, so a client can
        never see a live notification that the list endpoint does not have.
        """
        events = list(events)
        records: list[Notification] = []
        for event in events:
            record = await self.generator.on_event(session, event)
            if record is not None:
                records.append(record)
        summaries = await delivery.summarize(session, records)
        await commit(session)

        for record, summary in zip(records, summaries):
            self.broker.publish(record.recipient_id, delivery.notification_event(summary))
        for recipient_id, stream_event in delivery.transient_events(events):
            self.broker.publish(recipient_id, stream_event)
        return records

    async def aclose(self) -> None:
        self.broker.close()
        self.status_cache.clear()
        if self._redis is not None:
            await self._redis.aclose()


def get_runtime(request: Request) -> SocialRuntime:
    return request.app.state.runtime
