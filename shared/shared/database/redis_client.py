from typing import Any

import redis.asyncio as redis

RedisClient = redis.Redis


def get_redis_client(redis_url: str, **kwargs: Any) -> redis.Redis:
    """Build a client with its own pool; the caller owns `aclose()`."""
    return redis.from_url(redis_url, encoding="utf-8", decode_responses=True, **kwargs)
