"""
Custom exception hierarchy for record resolution and query building.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


class WordPressError(Exception):
    """Base exception for all wpquery errors."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


class MissingResourcesError(WordPressError):
    """Raised when the backing store returns fewer rows than requested ids."""

    def __init__(self, ids: Iterable[int]) -> None:
        self.ids = list(ids)
        super().__init__(_describe_missing(self.ids), context={"ids": self.ids})


class DependentResolutionError(WordPressError):
    """Raised when an auxiliary lookup for a record (parent, meta, terms) fails."""


class TaxonomyCycleError(DependentResolutionError):
    """Raised when a term's parent chain loops back on itself or runs too deep."""


class SlugNotFoundError(WordPressError):
    """Raised when a (possibly hierarchical) slug does not resolve to a term."""


class InvalidQueryError(WordPressError):
    """Raised when query options cannot be turned into a statement."""


class CacheError(WordPressError):
    """Raised by the cache adapter when the cache server cannot be reached."""


def _describe_missing(ids: list[int]) -> str:
    if not ids:
        return "could not find ids"
    if len(ids) == 1:
        return f"could not find ids {ids[0]}"
    head = ", ".join(str(item) for item in ids[:-1])
    return f"could not find ids {head} and {ids[-1]}"


__all__ = [
    "CacheError",
    "DependentResolutionError",
    "InvalidQueryError",
    "MissingResourcesError",
    "SlugNotFoundError",
    "TaxonomyCycleError",
    "WordPressError",
]
