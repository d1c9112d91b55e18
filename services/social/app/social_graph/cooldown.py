"""Redis-backed follow cooldown.

Key schema
----------
follow:cooldown:{follower_id}:{following_id}   "1"   TTL = cooldown seconds

``SET NX EX`` makes check-and-set atomic: the first attempt inside the window
sets the key and passes; later attempts find it and are refused.
"""
from __future__ import annotations

import logging
from uuid import UUID

from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


def _cooldown_key(follower_id: UUID, following_id: UUID) -> str:
    return f"follow:cooldown:{follower_id}:{following_id}"


class FollowCooldown:
    def __init__(self, redis: Redis, seconds: int) -> None:
        self.redis = redis
        self.seconds = seconds

    async def try_acquire(self, follower_id: UUID, following_id: UUID) -> bool:
        """Return False while a previous attempt for this pair is still cooling down.

        If Redis is unreachable the follow goes through; the unique-pair
        constraint still rejects duplicates.
        """
        try:
            was_set = await self.redis.set(
                _cooldown_key(follower_id, following_id), "1", nx=True, ex=self.seconds
            )
        except RedisError as exc:
            logger.warning("follow cooldown unavailable: %s", exc)
            return True
        return bool(was_set)
