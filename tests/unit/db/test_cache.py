"""
Unit tests for the Redis-backed record cache.
"""

from __future__ import annotations

import pytest

from tests.conftest import MockRedisClient
from wpquery.db.cache import RecordCache
from wpquery.exceptions import CacheError


class TestRecordCache:
    @pytest.mark.asyncio
    async def test_keys_are_namespaced(
        self, record_cache: RecordCache, mock_redis: MockRedisClient
    ) -> None:
        await record_cache.set("post:1", "{}")

        assert mock_redis.keys() == ["test:post:1"]
        assert await record_cache.get("post:1") == "{}"

    @pytest.mark.asyncio
    async def test_get_multi_returns_found_pairs_only(self, record_cache: RecordCache) -> None:
        await record_cache.set_multi({"a": "1", "c": "3"})

        assert await record_cache.get_multi(["a", "b", "c"]) == {"a": "1", "c": "3"}

    @pytest.mark.asyncio
    async def test_invalidate(self, record_cache: RecordCache) -> None:
        await record_cache.set("a", "1")
        await record_cache.invalidate("a")

        assert await record_cache.get("a") is None

    @pytest.mark.asyncio
    async def test_redis_errors_become_cache_errors(
        self, record_cache: RecordCache, mock_redis: MockRedisClient
    ) -> None:
        mock_redis.fail = True

        with pytest.raises(CacheError):
            await record_cache.get_multi(["a"])
        with pytest.raises(CacheError):
            await record_cache.set_multi({"a": "1"})
