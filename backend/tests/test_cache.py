"""Tests for caching functionality."""

import pytest
import redis.asyncio as redis

from portal.utils.cache import JSONCache, cache_key


class InMemoryRedis:
    """The handful of redis.asyncio.Redis calls JSONCache makes."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key):
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl

    async def scan_iter(self, match):
        prefix = match.rstrip("*")
        for key in list(self.data):
            if key == match or (match.endswith("*") and key.startswith(prefix)):
                yield key

    async def delete(self, *keys):
        for key in keys:
            self.data.pop(key, None)


class DownRedis:
    async def get(self, key):
        raise redis.ConnectionError("redis is down")

    async def setex(self, key, ttl, value):
        raise redis.ConnectionError("redis is down")

    async def scan_iter(self, match):
        raise redis.ConnectionError("redis is down")
        yield  # pragma: no cover


@pytest.mark.unit
class TestCacheKey:
    def test_short_strings_stay_readable(self):
        assert cache_key("sheets", "abc", "warga") == "sheets:abc:warga"

    def test_other_parts_are_hashed(self):
        key1 = cache_key("warga", 50, 0)
        key2 = cache_key("warga", 50, 0)
        key3 = cache_key("warga", 100, 0)

        assert key1 == key2
        assert key1 != key3
        assert len(key1) == 32


@pytest.mark.asyncio
class TestJSONCache:
    async def test_set_then_get(self):
        client = InMemoryRedis()
        cache = JSONCache(client, prefix="portal")

        await cache.set("sheets:x:warga", [{"id": 1, "rt": "01"}], ttl=300)

        assert await cache.get("sheets:x:warga") == [{"id": 1, "rt": "01"}]
        assert client.ttls == {"portal:sheets:x:warga": 300}

    async def test_miss(self):
        assert await JSONCache(InMemoryRedis()).get("nothing") is None

    async def test_invalidate_is_scoped_to_prefix(self):
        client = InMemoryRedis()
        client.data = {"portal:sheets:a": "1", "portal:sheets:b": "2", "other:sheets:a": "3"}
        cache = JSONCache(client, prefix="portal")

        assert await cache.invalidate("sheets:*") == 2
        assert list(client.data) == ["other:sheets:a"]

    async def test_fails_open_when_redis_is_down(self):
        cache = JSONCache(DownRedis(), prefix="portal")

        assert await cache.get("k") is None
        await cache.set("k", {"v": 1}, ttl=10)
        assert await cache.invalidate("k") == 0
