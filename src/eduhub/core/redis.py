"""
Redis Configuration

Async Redis client shared by draft storage and rate limiting.
Redis is optional: callers must cope with ``get_redis()`` returning None.
"""

from redis.asyncio import Redis, from_url

from eduhub.core.config import settings

redis_client: Redis | None = None


async def init_redis() -> Redis:
    """Connect to Redis and verify the connection. Call on startup."""
    global redis_client
    client = from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await client.ping()
    redis_client = client
    return redis_client


async def get_redis() -> Redis | None:
    """FastAPI dependency returning the shared client, or None if unavailable."""
    return redis_client


def is_redis_available() -> bool:
    """Check if the Redis client is initialized."""
    return redis_client is not None


async def close_redis() -> None:
    """Close the Redis connection."""
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
