"""
Engine, session factory and Redis client construction.
"""

from __future__ import annotations

import logging
import time

from redis.asyncio import Redis
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..config import Settings

LOGGER = logging.getLogger(__name__)


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database."""

    url = str(settings.database.url)
    options: dict[str, object] = {"echo": settings.database.echo}
    # SQLite uses a static pool without sizing arguments.
    if not url.startswith("sqlite"):
        options["pool_size"] = settings.database.pool_size
        options["pool_recycle"] = 3600
    return create_async_engine(url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a read-only session factory; each query opens its own short-lived session."""

    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def create_redis(settings: Settings) -> Redis:
    """Create the shared Redis client for the record cache."""

    return Redis.from_url(
        str(settings.cache.url),
        max_connections=settings.cache.max_connections,
        decode_responses=True,
    )


async def check_database_health(
    session_factory: async_sessionmaker[AsyncSession],
) -> tuple[bool, float]:
    """Check database connectivity and return (healthy, latency_ms)."""

    start = time.perf_counter()
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        return True, (time.perf_counter() - start) * 1000
    except SQLAlchemyError as exc:
        LOGGER.error("Database health check failed: %s", exc)
        return False, (time.perf_counter() - start) * 1000


async def check_redis_health(redis: Redis) -> tuple[bool, float]:
    """Check Redis connectivity and return (healthy, latency_ms)."""

    start = time.perf_counter()
    try:
        await redis.ping()
        return True, (time.perf_counter() - start) * 1000
    except RedisError as exc:
        LOGGER.error("Redis health check failed: %s", exc)
        return False, (time.perf_counter() - start) * 1000


__all__ = [
    "check_database_health",
    "check_redis_health",
    "create_engine",
    "create_redis",
    "create_session_factory",
]
