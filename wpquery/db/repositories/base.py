"""
Base repository class with shared utilities.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from sqlalchemy import Row, Select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...config import Settings, get_settings
from ...iterator import IdIterator
from ..loader import BatchLoader, CacheableRecord
from ..query import encode_cursor, to_sql

LOGGER = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=CacheableRecord)

Transform = Callable[[list[RecordT]], Awaitable[list[RecordT]]]


class BaseRepository:
    """
    Base class for all repositories.

    Every statement runs in its own short-lived session so that concurrent
    sub-resolutions never share one.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        loader: BatchLoader,
        settings: Settings | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._loader = loader
        self._settings = settings or get_settings()

    @property
    def loader(self) -> BatchLoader:
        return self._loader

    @property
    def settings(self) -> Settings:
        return self._settings

    async def _rows(self, stmt: Select[Any]) -> list[Row[Any]]:
        """Execute a statement and return every row."""

        if LOGGER.isEnabledFor(logging.DEBUG):
            sql, params = to_sql(stmt)
            LOGGER.debug("Executing %s with %s", sql, params)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.all())

    async def _scalars(self, stmt: Select[Any]) -> list[Any]:
        """Execute a statement and return the first column of every row."""

        return [row[0] for row in await self._rows(stmt)]

    async def _query_ids(self, stmt: Select[Any], after: str | None) -> IdIterator:
        """Run an ``(id, order value)`` statement and wrap it into an iterator."""

        rows = await self._rows(stmt)
        return IdIterator(
            [row[0] for row in rows],
            [encode_cursor(row[1]) for row in rows],
            cursor=after,
        )

    async def _resolve(
        self,
        ids: Sequence[int],
        *,
        key_template: str,
        record_type: type[RecordT],
        fetch: Callable[[list[int]], Awaitable[list[RecordT]]],
        transforms: Sequence[Transform[RecordT]] = (),
    ) -> list[RecordT]:
        """
        Cache-aside resolution of a batch of ids.

        ``fetch`` receives the ids the cache could not serve (each id once)
        and must return one record per id in the same order. Transforms see
        the whole result list, cache-served records included, and run only when
        something was fetched, before the write-back. They must keep the list
        length and order and be idempotent.
        """

        if not ids:
            return []

        results, key_map = await self._loader.load_batch(key_template, ids, record_type)
        if not key_map:
            return results  # type: ignore[return-value]

        missing_ids = [ids[positions[0]] for positions in key_map.values()]
        fetched = await fetch(missing_ids)
        for positions, record in zip(key_map.values(), fetched):
            for index in positions:
                results[index] = record

        for transform in transforms:
            results = await transform(results)  # type: ignore[arg-type]

        self._loader.write_back(key_map, results)
        return results  # type: ignore[return-value]


__all__ = ["BaseRepository", "Transform"]
