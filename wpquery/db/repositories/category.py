"""
Category and tag repositories.

Category links are built from the parent chain: a root category links to
``/category/{slug}`` and every child appends its slug to its parent's link.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from functools import partial

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...config import Settings
from ...enums import Taxonomy
from ...exceptions import DependentResolutionError, TaxonomyCycleError, WordPressError
from ...records import Category, Tag
from ..loader import BatchLoader, fan_in
from .base import BaseRepository
from .term import TermRepository

LOGGER = logging.getLogger(__name__)

CATEGORY_CACHE_KEY = "category:{id}"
TAG_CACHE_KEY = "tag:{id}"


class CategoryRepository(BaseRepository):
    """Resolves categories together with their hierarchical links."""

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

    async def get_categories(
        self,
        ids: Sequence[int],
        *,
        _chain: tuple[int, ...] = (),
    ) -> list[Category]:
        """Return one category per id in input order, links included."""

        return await self._resolve(
            ids,
            key_template=CATEGORY_CACHE_KEY,
            record_type=Category,
            fetch=partial(self._fetch_categories, chain=_chain),
        )

    async def _fetch_categories(
        self, ids: list[int], *, chain: tuple[int, ...]
    ) -> list[Category]:
        terms = await self._terms.fetch_terms(ids, Taxonomy.CATEGORY)
        categories = [Category(**term.term_fields()) for term in terms]
        await fan_in(self._link(category, chain) for category in categories)
        return categories

    async def _link(self, category: Category, chain: tuple[int, ...]) -> None:
        if not category.parent:
            category.link = f"/category/{category.slug}"
            return

        chain = (*chain, category.id)
        if category.parent in chain:
            raise TaxonomyCycleError(
                f"category {category.id} has itself as an ancestor through {category.parent}",
                context={"category": category.id, "parent": category.parent, "chain": chain},
            )
        if len(chain) >= self._settings.query.max_parent_depth:
            raise TaxonomyCycleError(
                f"category {category.id} is nested deeper than "
                f"{self._settings.query.max_parent_depth} levels",
                context={"category": category.id, "parent": category.parent, "chain": chain},
            )

        try:
            parents = await self.get_categories([category.parent], _chain=chain)
        except TaxonomyCycleError:
            raise
        except WordPressError as exc:
            raise DependentResolutionError(
                f"failed to get parent category for {category.id}: {category.parent}",
                context={"category": category.id, "parent": category.parent},
            ) from exc

        category.link = f"{parents[0].link}/{category.slug}"


class TagRepository(BaseRepository):
    """Resolves flat ``post_tag`` terms."""

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

    async def get_tags(self, ids: Sequence[int]) -> list[Tag]:
        """Return one tag per id in input order."""

        return await self._resolve(
            ids,
            key_template=TAG_CACHE_KEY,
            record_type=Tag,
            fetch=self._fetch_tags,
        )

    async def _fetch_tags(self, ids: list[int]) -> list[Tag]:
        terms = await self._terms.fetch_terms(ids, Taxonomy.POST_TAG)
        return [Tag(**term.term_fields(), link=f"/tag/{term.slug}") for term in terms]


__all__ = ["CATEGORY_CACHE_KEY", "CategoryRepository", "TAG_CACHE_KEY", "TagRepository"]
