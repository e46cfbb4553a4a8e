"""
Term repository: term records, term queries and the category hierarchy.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import Row, select

from ...enums import Taxonomy
from ...exceptions import MissingResourcesError, SlugNotFoundError
from ...iterator import IdIterator
from ...records import Term
from ..loader import dedupe
from ..models import TermRow, TermTaxonomyRow
from ..query import TermQueryBuilder, TermQueryOptions
from .base import BaseRepository

LOGGER = logging.getLogger(__name__)

TERM_CACHE_KEY = "term:{id}"


def term_from_row(row: Row) -> Term:
    """Build a ``Term`` from a joined ``terms`` / ``term_taxonomy`` row."""

    # "count" is also a tuple method on Row, so go through the mapping.
    values = row._mapping
    return Term(
        id=values["term_id"],
        name=values["name"],
        slug=values["slug"],
        group=values["term_group"],
        taxonomy_id=values["term_taxonomy_id"],
        taxonomy=values["taxonomy"],
        description=values["description"],
        parent=values["parent"],
        count=values["count"],
    )


class TermRepository(BaseRepository):
    """Data access helpers for terms of every taxonomy."""

    async def get_terms(self, ids: Sequence[int]) -> list[Term]:
        """Return one term per id, in input order (duplicates allowed)."""

        return await self._resolve(
            ids,
            key_template=TERM_CACHE_KEY,
            record_type=Term,
            fetch=self.fetch_terms,
        )

    async def fetch_terms(
        self,
        ids: Sequence[int],
        taxonomy: Taxonomy | None = None,
    ) -> list[Term]:
        """
        Load terms straight from the database.

        Raises ``MissingResourcesError`` naming every requested id without a
        row (restricted to ``taxonomy`` when one is given).
        """

        if not ids:
            return []

        unique_ids, positions = dedupe(ids)
        stmt = (
            select(
                TermRow.term_id,
                TermRow.name,
                TermRow.slug,
                TermRow.term_group,
                TermTaxonomyRow.term_taxonomy_id,
                TermTaxonomyRow.taxonomy,
                TermTaxonomyRow.description,
                TermTaxonomyRow.parent,
                TermTaxonomyRow.count,
            )
            .join(TermTaxonomyRow, TermTaxonomyRow.term_id == TermRow.term_id)
            .where(TermRow.term_id.in_(unique_ids))
            .order_by(TermTaxonomyRow.term_taxonomy_id)
        )
        if taxonomy is not None:
            stmt = stmt.where(TermTaxonomyRow.taxonomy == taxonomy.value)

        found: dict[int, Term] = {}
        for row in await self._rows(stmt):
            found.setdefault(row.term_id, term_from_row(row))

        missing = [item for item in unique_ids if item not in found]
        if missing:
            raise MissingResourcesError(missing)

        results: list[Term] = [None] * len(ids)  # type: ignore[list-item]
        for term_id, indices in positions.items():
            for index in indices:
                results[index] = found[term_id]
        return results

    async def query_terms(self, options: TermQueryOptions) -> IdIterator:
        """Return the ids of the terms matching the options, one page at a time."""

        builder = TermQueryBuilder(default_limit=self._settings.query.default_limit)
        return await self._query_ids(builder.build(options), options.after)

    async def get_descendant_ids(self, root_id: int) -> list[int]:
        """
        Return the root followed by every descendant, breadth first.

        Each id appears once. Only ids not seen yet join the next level, so a
        cyclic hierarchy still terminates.
        """

        seen = {root_id}
        result = [root_id]
        frontier = [root_id]
        while frontier:
            children = await self._scalars(
                select(TermTaxonomyRow.term_id)
                .where(TermTaxonomyRow.parent.in_(frontier))
                .order_by(TermTaxonomyRow.term_id)
            )
            frontier = []
            for child in children:
                if child not in seen:
                    seen.add(child)
                    result.append(child)
                    frontier.append(child)
        return result

    async def get_child_id(self, parent_id: int, slug: str) -> int | None:
        """Return the id of the direct child of ``parent_id`` with the given slug."""

        ids = await self._scalars(
            select(TermRow.term_id)
            .join(TermTaxonomyRow, TermTaxonomyRow.term_id == TermRow.term_id)
            .where(TermTaxonomyRow.parent == parent_id, TermRow.slug == slug)
            .order_by(TermRow.term_id)
            .limit(1)
        )
        return ids[0] if ids else None

    async def get_category_id_by_slug(self, slug: str) -> int:
        """
        Resolve a category slug path such as ``news/tech`` to an id.

        Each segment must be a child of the category matched by the previous
        one; the first segment may match a category anywhere in the tree.
        """

        parts = [part for part in slug.split("/") if part]
        if not parts:
            raise SlugNotFoundError("empty category slug", context={"slug": slug})

        category_id = 0
        for part in parts:
            page = await self.query_terms(
                TermQueryOptions(
                    taxonomy=Taxonomy.CATEGORY,
                    slug=part,
                    parent_id=category_id,
                    limit=1,
                )
            )
            category_id = next(page, 0)
            if not category_id:
                raise SlugNotFoundError(
                    f"non-existent category slug {slug!r}", context={"slug": slug, "segment": part}
                )
        return category_id


__all__ = ["TERM_CACHE_KEY", "TermRepository", "term_from_row"]
