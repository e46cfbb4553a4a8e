"""
Forward-only id sequences returned by the ``query_*`` operations.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence


class IdIterator(Iterator[int]):
    """
    Lazily hands out the ids of one result page.

    ``cursor`` is the opaque token to pass as ``after`` to resume right after
    the last id consumed so far; before anything is consumed it is the cursor
    the page was requested with.
    """

    def __init__(
        self,
        ids: Sequence[int],
        cursors: Sequence[str] | None = None,
        *,
        cursor: str | None = None,
    ) -> None:
        if cursors is not None and len(cursors) != len(ids):
            raise ValueError("ids and cursors must have the same length.")
        self._ids = list(ids)
        self._cursors = list(cursors) if cursors is not None else None
        self._position = 0
        self._cursor = cursor or ""

    @classmethod
    def empty(cls) -> IdIterator:
        return cls([])

    @property
    def cursor(self) -> str:
        return self._cursor

    @property
    def exhausted(self) -> bool:
        return self._position >= len(self._ids)

    def __iter__(self) -> IdIterator:
        return self

    def __next__(self) -> int:
        if self._position >= len(self._ids):
            raise StopIteration
        item = self._ids[self._position]
        if self._cursors is not None:
            self._cursor = self._cursors[self._position]
        self._position += 1
        return item

    def to_list(self) -> list[int]:
        """Consume and return every remaining id."""

        return list(self)

    def __repr__(self) -> str:
        return f"IdIterator(remaining={len(self._ids) - self._position}, cursor={self._cursor!r})"


__all__ = ["IdIterator"]
