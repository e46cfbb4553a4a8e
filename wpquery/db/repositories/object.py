"""
Object repository for rows of the posts table and their metadata.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...config import Settings
from ...enums import Taxonomy
from ...exceptions import MissingResourcesError
from ...iterator import IdIterator
from ...records import Object
from ..loader import BatchLoader, dedupe
from ..models import PostMetaRow, PostRow
from ..query import ObjectQueryBuilder, ObjectQueryOptions, TermQueryOptions
from .base import BaseRepository
from .term import TermRepository

LOGGER = logging.getLogger(__name__)

_OPEN = "open"


def _url_list(value: str | None) -> list[str]:
    return value.split() if value else []


def object_from_row(row: PostRow) -> Object:
    """Convert an ORM row into an ``Object`` record."""

    return Object(
        id=row.id,
        author_id=row.post_author,
        date=row.post_date,
        date_gmt=row.post_date_gmt,
        content=row.post_content,
        title=row.post_title,
        excerpt=row.post_excerpt,
        status=row.post_status,
        comment_status=row.comment_status == _OPEN,
        ping_status=row.ping_status == _OPEN,
        password=row.post_password,
        name=row.post_name,
        to_ping=_url_list(row.to_ping),
        pinged=_url_list(row.pinged),
        modified=row.post_modified,
        modified_gmt=row.post_modified_gmt,
        content_filtered=row.post_content_filtered,
        parent_id=row.post_parent,
        guid=row.guid,
        menu_order=row.menu_order,
        type=row.post_type,
        mime_type=row.post_mime_type,
        comment_count=row.comment_count,
    )


class ObjectRepository(BaseRepository):
    """Uncached access to posts-table rows, their metadata and term links."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        loader: BatchLoader,
        settings: Settings | None = None,
        *,
        terms: TermRepository,
    ) -> None:
        super().__init__(session_factory, loader, settings)
        self._terms = terms

    async def get_objects(self, ids: Sequence[int]) -> list[Object]:
        """
        Return one object per id in input order.

        Raises ``MissingResourcesError`` naming every id without a row.
        """

        if not ids:
            return []

        unique_ids, positions = dedupe(ids)
        rows = await self._scalars(select(PostRow).where(PostRow.id.in_(unique_ids)))
        found = {row.id: object_from_row(row) for row in rows}

        missing = [item for item in unique_ids if item not in found]
        if missing:
            raise MissingResourcesError(missing)

        results: list[Object] = [None] * len(ids)  # type: ignore[list-item]
        for object_id, indices in positions.items():
            for index in indices:
                results[index] = found[object_id]
        return results

    async def get_meta(self, object_id: int, *keys: str) -> dict[str, str]:
        """Return the metadata of one object, optionally restricted to ``keys``."""

        stmt = select(PostMetaRow.meta_key, PostMetaRow.meta_value).where(
            PostMetaRow.post_id == object_id
        )
        if keys:
            stmt = stmt.where(PostMetaRow.meta_key.in_(keys))
        stmt = stmt.order_by(PostMetaRow.meta_id)

        return {
            key: value or "" for key, value in await self._rows(stmt) if key is not None
        }

    async def get_meta_for(
        self, object_ids: Iterable[int], *keys: str
    ) -> dict[int, dict[str, str]]:
        """Return the metadata of many objects with a single query."""

        unique_ids, _ = dedupe(list(object_ids))
        meta: dict[int, dict[str, str]] = {object_id: {} for object_id in unique_ids}
        if not unique_ids:
            return meta

        stmt = select(PostMetaRow.post_id, PostMetaRow.meta_key, PostMetaRow.meta_value).where(
            PostMetaRow.post_id.in_(unique_ids)
        )
        if keys:
            stmt = stmt.where(PostMetaRow.meta_key.in_(keys))
        stmt = stmt.order_by(PostMetaRow.meta_id)

        for post_id, key, value in await self._rows(stmt):
            if key is not None:
                meta[post_id][key] = value or ""
        return meta

    async def get_taxonomy(self, object_id: int, *taxonomies: Taxonomy) -> IdIterator:
        """Return every term id linking the object into any of the taxonomies."""

        if not taxonomies:
            return IdIterator.empty()

        return await self._terms.query_terms(
            TermQueryOptions(
                object_id=object_id,
                taxonomy_in=[taxonomy.value for taxonomy in taxonomies],
                limit=-1,
            )
        )

    async def query_objects(self, options: ObjectQueryOptions) -> IdIterator:
        """Return the ids of the objects matching the options, one page at a time."""

        builder = ObjectQueryBuilder(
            self._terms, default_limit=self._settings.query.default_limit
        )
        stmt = await builder.build(options)
        return await self._query_ids(stmt, options.after)


__all__ = ["ObjectRepository", "object_from_row"]
