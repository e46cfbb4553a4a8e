"""
Cache-aside batch loading.

``dedupe`` collapses repeated ids, ``BatchLoader`` consults the record cache
for a batch of ids and writes freshly loaded records back in the background,
and ``fan_in`` runs concurrent sub-resolutions and reports the first failure.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Coroutine, Iterable, Sequence
from typing import Any, Protocol, Self, TypeVar

from ..exceptions import CacheError
from .cache import RecordCache

LOGGER = logging.getLogger(__name__)


class CacheableRecord(Protocol):
    """A record kind with an explicit cache encode/decode pair."""

    def to_cache(self) -> dict[str, Any]: ...

    @classmethod
    def from_cache(cls, payload: dict[str, Any]) -> Self: ...


RecordT = TypeVar("RecordT", bound=CacheableRecord)
T = TypeVar("T")


def dedupe(ids: Sequence[int]) -> tuple[list[int], dict[int, list[int]]]:
    """
    Collapse repeated ids.

    Returns the unique ids in first-occurrence order and a map from each id
    to every position it occupied in the input.
    """

    unique: list[int] = []
    positions: dict[int, list[int]] = {}
    for index, item in enumerate(ids):
        if item not in positions:
            unique.append(item)
            positions[item] = []
        positions[item].append(index)
    return unique, positions


async def fan_in(awaitables: Iterable[Awaitable[T]]) -> list[T]:
    """
    Run every awaitable as its own task and wait for all of them.

    Siblings are never cancelled: every task is drained before the first
    failure (in completion order) is raised. Results come back in input order.
    """

    tasks = [asyncio.ensure_future(item) for item in awaitables]
    first_error: BaseException | None = None
    for finished in asyncio.as_completed(tasks):
        try:
            await finished
        except Exception as exc:
            if first_error is None:
                first_error = exc
    if first_error is not None:
        raise first_error
    return [task.result() for task in tasks]


class BackgroundTasks:
    """Keeps fire-and-forget tasks referenced until they finish."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def join(self) -> None:
        """Wait for every pending task, including ones spawned while waiting."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.join()

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.error("Background task %s failed: %s", task.get_name(), exc)


class BatchLoader:
    """Cache-aside front for batched record lookups."""

    def __init__(
        self,
        cache: RecordCache | None,
        *,
        read_enabled: bool = True,
        background: BackgroundTasks | None = None,
    ) -> None:
        self._cache = cache
        self._read_enabled = read_enabled
        self._background = background or BackgroundTasks()

    @property
    def background(self) -> BackgroundTasks:
        return self._background

    @property
    def reads_cache(self) -> bool:
        return self._cache is not None and self._read_enabled

    async def load_batch(
        self,
        key_template: str,
        ids: Sequence[int],
        record_type: type[RecordT],
    ) -> tuple[list[RecordT | None], dict[str, list[int]]]:
        """
        Fill the result slots that the cache can serve.

        Returns one slot per input id (None where the cache missed) and the
        map of still-missing cache keys to the input positions they cover.
        """

        results: list[RecordT | None] = [None] * len(ids)
        unique_ids, positions = dedupe(ids)
        key_map = {key_template.format(id=item): positions[item] for item in unique_ids}

        cache = self._cache
        if cache is None or not self._read_enabled or not key_map:
            return results, key_map

        try:
            found = await cache.get_multi(list(key_map))
        except CacheError as exc:
            LOGGER.warning("Cache read failed, falling back to the database: %s", exc)
            return results, key_map

        for key, raw in found.items():
            try:
                record = record_type.from_cache(json.loads(raw))
            except (ValueError, KeyError, TypeError) as exc:
                LOGGER.warning("Discarding undecodable cache entry %s: %s", key, exc)
                continue
            for index in key_map.pop(key):
                results[index] = record

        LOGGER.debug(
            "Cache served %d of %d keys for %s", len(found), len(found) + len(key_map), key_template
        )
        return results, key_map

    def write_back(
        self,
        key_map: dict[str, list[int]],
        results: Sequence[CacheableRecord | None],
    ) -> asyncio.Task[None] | None:
        """Schedule a best-effort multi-set of the freshly loaded records."""

        if self._cache is None:
            return None

        items: dict[str, str] = {}
        for key, indices in key_map.items():
            index = indices[0]
            if index >= len(results):
                continue
            record = results[index]
            if record is not None:
                items[key] = json.dumps(record.to_cache())

        if not items:
            return None
        return self._background.spawn(self._store(items), name=f"cache-write-back:{len(items)}")

    async def load_value(self, key: str) -> Any | None:
        """Return a single decoded cache payload, or None on a miss or failure."""

        cache = self._cache
        if cache is None or not self._read_enabled:
            return None
        try:
            raw = await cache.get(key)
        except CacheError as exc:
            LOGGER.warning("Cache read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            LOGGER.warning("Discarding undecodable cache entry %s: %s", key, exc)
            return None

    def store_value(self, key: str, payload: Any) -> asyncio.Task[None] | None:
        """Schedule a best-effort single-key write."""

        if self._cache is None:
            return None
        return self._background.spawn(
            self._store({key: json.dumps(payload)}), name=f"cache-write-back:{key}"
        )

    async def _store(self, items: dict[str, str]) -> None:
        if self._cache is None:
            return
        try:
            await self._cache.set_multi(items)
        except CacheError as exc:
            LOGGER.warning("Cache write-back of %d records failed: %s", len(items), exc)


__all__ = ["BackgroundTasks", "BatchLoader", "CacheableRecord", "dedupe", "fan_in"]
