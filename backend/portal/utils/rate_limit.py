"""Sliding-window rate limiting in Redis.

Each key holds a sorted set of request timestamps. Like the read cache, the
limiter fails open: if Redis is unreachable the request is allowed.
"""

import logging
import time
import uuid

import redis.asyncio as redis
from fastapi import Depends

from portal.config import Settings, get_settings
from portal.utils.cache import get_redis

logger = logging.getLogger(__name__)


class RateLimiter:
    def __init__(self, client: redis.Redis, prefix: str = "ratelimit"):
        self._client = client
        self._prefix = prefix

    async def check(self, key: str, limit: int, window: int) -> bool:
        """Count one request against ``key``; False once ``limit`` is reached.

        Args:
            key: Unique identifier (e.g. "login:203.0.113.7")
            limit: Maximum requests allowed in the window
            window: Window length in seconds
        """
        current_time = time.time()
        redis_key = f"{self._prefix}:{key}"

        try:
            await self._client.zremrangebyscore(redis_key, 0, current_time - window)
            count = await self._client.zcard(redis_key)
            if count >= limit:
                return False

            await self._client.zadd(redis_key, {f"{current_time}:{uuid.uuid4().hex}": current_time})
            await self._client.expire(redis_key, window)
            return True
        except redis.RedisError as e:
            logger.error("Rate limit check failed: %s", e)
            return True


def get_rate_limiter(settings: Settings = Depends(get_settings)) -> RateLimiter:
    return RateLimiter(get_redis(settings.redis_url))
