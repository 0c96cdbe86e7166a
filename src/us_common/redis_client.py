"""Shared redis.asyncio client for the projection cache.

Redis only ever holds projections that can be rebuilt from PostgreSQL, so
short socket timeouts are used: a slow cache fails the request fast
instead of stalling it.
"""

import logging

import redis.asyncio as aioredis

from config.settings import settings

logger = logging.getLogger(__name__)

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Return the process-wide client, creating its pool on first use."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=2,
            socket_connect_timeout=2,
            health_check_interval=30,
        )
    return _client


async def ping_redis() -> None:
    """Startup probe; raises if Redis is unreachable."""
    client = await get_redis()
    await client.ping()
    logger.info("Redis reachable at %s", settings.REDIS_URL.rsplit("@", 1)[-1])


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
