"""
Redis-backed record cache.

Values are opaque strings to this layer; the record codecs in
``wpquery.records`` decide what goes into them.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..exceptions import CacheError


class RecordCache:
    """Namespaced get/set cache over Redis with multi-key operations."""

    def __init__(self, client: Redis, *, namespace: str = "wp", ttl_seconds: int = 900) -> None:
        self._client = client
        self._namespace = namespace
        self._ttl_seconds = ttl_seconds

    @property
    def client(self) -> Redis:
        return self._client

    async def get(self, key: str) -> str | None:
        """Return the cached value for a key or None on a miss."""

        try:
            value = await self._client.get(self._build_key(key))
        except RedisError as exc:
            raise CacheError(f"cache get failed for {key}") from exc
        return _as_text(value)

    async def get_multi(self, keys: Sequence[str]) -> dict[str, str]:
        """Return the subset of keys that were found, mapped to their values."""

        if not keys:
            return {}
        try:
            values = await self._client.mget([self._build_key(key) for key in keys])
        except RedisError as exc:
            raise CacheError(f"cache multi-get failed for {len(keys)} keys") from exc
        return {
            key: text
            for key, value in zip(keys, values)
            if (text := _as_text(value)) is not None
        }

    async def set(self, key: str, value: str) -> None:
        """Store a single value with the configured TTL."""

        try:
            await self._client.set(self._build_key(key), value, ex=self._ttl_seconds)
        except RedisError as exc:
            raise CacheError(f"cache set failed for {key}") from exc

    async def set_multi(self, items: Mapping[str, str]) -> None:
        """Store several values in one pipelined round-trip."""

        if not items:
            return
        try:
            async with self._client.pipeline(transaction=False) as pipe:
                for key, value in items.items():
                    pipe.set(self._build_key(key), value, ex=self._ttl_seconds)
                await pipe.execute()
        except RedisError as exc:
            raise CacheError(f"cache multi-set failed for {len(items)} keys") from exc

    async def invalidate(self, *keys: str) -> None:
        """Delete cached values."""

        if not keys:
            return
        try:
            await self._client.delete(*(self._build_key(key) for key in keys))
        except RedisError as exc:
            raise CacheError(f"cache delete failed for {len(keys)} keys") from exc

    async def aclose(self) -> None:
        await self._client.aclose()

    def _build_key(self, key: str) -> str:
        return f"{self._namespace}:{key}"


def _as_text(value: str | bytes | None) -> str | None:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


__all__ = ["RecordCache"]
