"""Projection cache: explicit cache-aside over Redis.

Partitions (key = f"{prefix}{partition}::{key}"):
  users::{user_id}         UserResponse JSON
  usersByEmail::{email}    UserResponse JSON
  cards::{card_id}         CardInfoResponse JSON

Read path:  get → miss → PostgreSQL → put
Write path: evict the affected keys inside the DB transaction, before the
            commit (a Redis failure rolls the write back); after the commit,
            refresh or evict again, best effort, to drop any value a
            concurrent reader cached from the pre-commit row.
Every value expires after settings.CACHE_TTL_SECONDS.
"""

import json
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Protocol

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import settings
from src.us_common.redis_client import get_redis

logger = logging.getLogger(__name__)

USERS = "users"
USERS_BY_EMAIL = "usersByEmail"
CARDS = "cards"


class ProjectionCache(Protocol):
    async def get(self, partition: str, key: str | int) -> dict[str, Any] | None: ...

    async def put(self, partition: str, key: str | int, value: dict[str, Any]) -> None: ...

    async def evict(self, partition: str, key: str | int) -> None: ...


class RedisProjectionCache:
    """Redis-backed ProjectionCache. Redis errors propagate to the caller."""

    def __init__(
        self,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
        ttl_seconds: int | None = None,
        prefix: str | None = None,
    ) -> None:
        self._redis_factory = redis_factory
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.CACHE_TTL_SECONDS
        self._prefix = prefix if prefix is not None else settings.CACHE_KEY_PREFIX

    def key(self, partition: str, key: str | int) -> str:
        return f"{self._prefix}{partition}::{key}"

    async def get(self, partition: str, key: str | int) -> dict[str, Any] | None:
        redis = await self._redis_factory()
        raw = await redis.get(self.key(partition, key))
        if raw is None:
            logger.debug("Cache miss: %s::%s", partition, key)
            return None
        logger.debug("Cache hit: %s::%s", partition, key)
        value: dict[str, Any] = json.loads(raw)
        return value

    async def put(self, partition: str, key: str | int, value: dict[str, Any]) -> None:
        redis = await self._redis_factory()
        await redis.set(self.key(partition, key), json.dumps(value), ex=self._ttl)

    async def evict(self, partition: str, key: str | int) -> None:
        redis = await self._redis_factory()
        await redis.delete(self.key(partition, key))


CacheKey = tuple[str, str | int]


async def evict_all(cache: ProjectionCache, keys: Iterable[CacheKey]) -> None:
    """Evict every key; errors propagate (use inside the write transaction)."""
    for partition, key in keys:
        await cache.evict(partition, key)


async def evict_all_quietly(cache: ProjectionCache, keys: Iterable[CacheKey]) -> None:
    """Post-commit second eviction pass; a Redis failure is logged, not raised."""
    try:
        await evict_all(cache, keys)
    except RedisError:
        logger.warning("Post-commit cache eviction failed", exc_info=True)


async def put_quietly(
    cache: ProjectionCache, partition: str, key: str | int, value: dict[str, Any]
) -> None:
    """Post-commit refresh; the key was already evicted, so a failure only costs a miss."""
    try:
        await cache.put(partition, key, value)
    except RedisError:
        logger.warning("Cache refresh failed: %s::%s", partition, key, exc_info=True)
