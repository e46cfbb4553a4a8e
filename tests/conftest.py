"""
Shared pytest fixtures for database, Redis, settings and reader wiring.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from wpquery.config import CacheSettings, QuerySettings, Settings
from wpquery.db.cache import RecordCache
from wpquery.db.models import Base
from wpquery.reader import ContentReader


class MockRedisClient:
    """Minimal in-memory Redis replacement for async tests."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self.fail = False
        self.get_calls = 0
        self.mget_calls = 0
        self.set_calls = 0

    def _check(self) -> None:
        if self.fail:
            raise RedisConnectionError("redis is down")

    async def get(self, key: str) -> str | None:
        self._check()
        self.get_calls += 1
        return self._store.get(key)

    async def mget(self, keys: Sequence[str]) -> list[str | None]:
        self._check()
        self.mget_calls += 1
        return [self._store.get(key) for key in keys]

    async def set(self, key: str, value: str, ex: int | None = None) -> None:  # noqa: ARG002
        self._check()
        self.set_calls += 1
        self._store[key] = value

    async def delete(self, *keys: str) -> None:
        self._check()
        for key in keys:
            self._store.pop(key, None)

    def pipeline(self, transaction: bool = True) -> MockPipeline:  # noqa: ARG002
        return MockPipeline(self)

    async def ping(self) -> bool:
        self._check()
        return True

    async def flushdb(self) -> None:
        self._store.clear()

    async def aclose(self) -> None:
        return None

    def keys(self) -> list[str]:
        return sorted(self._store)


class MockPipeline:
    """Buffers commands and applies them to the owning client on execute."""

    def __init__(self, client: MockRedisClient) -> None:
        self._client = client
        self._commands: list[tuple[str, str, int | None]] = []

    async def __aenter__(self) -> MockPipeline:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self._commands.clear()

    def set(self, key: str, value: str, ex: int | None = None) -> MockPipeline:
        self._commands.append((key, value, ex))
        return self

    async def execute(self) -> list[bool]:
        results = []
        for key, value, ex in self._commands:
            await self._client.set(key, value, ex=ex)
            results.append(True)
        return results


class QueryCounter:
    """Counts SQL statements sent through an engine."""

    def __init__(self) -> None:
        self.count = 0
        self.statements: list[str] = []

    def __call__(self, conn: Any, cursor: Any, statement: str, *args: Any) -> None:
        self.count += 1
        self.statements.append(statement)


@pytest.fixture
async def db_engine(tmp_path) -> AsyncIterator[AsyncEngine]:
    """Provide a file-backed SQLite engine so concurrent sessions share data."""

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'wordpress.db'}")
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Session used to seed rows; tests commit what they add."""

    async with session_factory() as session:
        yield session


@pytest.fixture
def query_counter(db_engine: AsyncEngine) -> QueryCounter:
    counter = QueryCounter()
    event.listen(db_engine.sync_engine, "before_cursor_execute", counter)
    return counter


@pytest.fixture
async def mock_redis() -> AsyncIterator[MockRedisClient]:
    """Yield a mock Redis client with in-memory storage."""

    client = MockRedisClient()
    try:
        yield client
    finally:
        await client.flushdb()


@pytest.fixture
def record_cache(mock_redis: MockRedisClient) -> RecordCache:
    return RecordCache(mock_redis, namespace="test", ttl_seconds=60)  # type: ignore[arg-type]


@pytest.fixture
def settings_override() -> Settings:
    """Settings with test-friendly query limits and the cache enabled."""

    return Settings(
        cache=CacheSettings(url="redis://localhost:6379/15", namespace="test"),
        query=QuerySettings(default_limit=10, max_parent_depth=8),
    )


@pytest.fixture
async def reader(
    session_factory: async_sessionmaker[AsyncSession],
    record_cache: RecordCache,
    settings_override: Settings,
) -> AsyncIterator[ContentReader]:
    """Content reader backed by the test database and the in-memory cache."""

    content_reader = ContentReader(session_factory, record_cache, settings=settings_override)
    try:
        yield content_reader
    finally:
        await content_reader.background.join()


@pytest.fixture
async def uncached_reader(
    session_factory: async_sessionmaker[AsyncSession],
    settings_override: Settings,
) -> AsyncIterator[ContentReader]:
    """Content reader without a cache."""

    content_reader = ContentReader(session_factory, None, settings=settings_override)
    try:
        yield content_reader
    finally:
        await content_reader.background.join()
