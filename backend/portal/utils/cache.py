"""Redis caching utilities for the portal.

Spreadsheet reads are slow and rate-limited upstream, so whole-sheet results
are cached in Redis for a few minutes. Every operation fails open: if Redis
is down the caller just reads live.
"""

import hashlib
import json
import logging
from typing import Any, Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)

# Global Redis connection pool
_redis_client: Optional[redis.Redis] = None


def get_redis(redis_url: str) -> redis.Redis:
    """Get or create the shared Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
            socket_connect_timeout=2,
        )
    return _redis_client


async def close_redis():
    """Close Redis connection (call on app shutdown)."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def cache_key(*parts: Any) -> str:
    """Deterministic key from arbitrary JSON-serialisable parts.

    Short string parts are kept readable; anything else is hashed.
    """
    if all(isinstance(p, str) and len(p) <= 64 for p in parts):
        return ":".join(parts)
    key_data = json.dumps(parts, sort_keys=True, default=str)
    return hashlib.md5(key_data.encode()).hexdigest()


class JSONCache:
    """JSON values in Redis under a common prefix, with per-entry TTL."""

    def __init__(self, client: redis.Redis, prefix: str = "cache"):
        self._client = client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def get(self, key: str) -> Any | None:
        try:
            cached_value = await self._client.get(self._key(key))
        except redis.RedisError as e:
            logger.warning("Redis error (falling back to uncached): %s", e)
            return None

        if cached_value is None:
            logger.debug("Cache MISS: %s", key)
            return None
        logger.debug("Cache HIT: %s", key)
        return json.loads(cached_value)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        try:
            await self._client.setex(self._key(key), ttl, json.dumps(value, default=str))
        except redis.RedisError as e:
            logger.warning("Redis error (result not cached): %s", e)

    async def invalidate(self, pattern: str) -> int:
        """Delete keys matching ``pattern`` under this cache's prefix."""
        scoped_pattern = self._key(pattern)
        try:
            keys = [key async for key in self._client.scan_iter(match=scoped_pattern)]
            if keys:
                await self._client.delete(*keys)
                logger.info("Invalidated %d cache keys matching %s", len(keys), scoped_pattern)
            return len(keys)
        except redis.RedisError as e:
            logger.warning("Failed to invalidate cache: %s", e)
            return 0
