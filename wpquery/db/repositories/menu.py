"""
Menu repository: navigation menus assembled from ``nav_menu_item`` objects.

Building a menu touches every item, its metadata and the object each item
points at, so whole trees are cached under the menu slug or id.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...config import Settings
from ...enums import MenuItemType, PostType, Taxonomy
from ...exceptions import DependentResolutionError, WordPressError
from ...phpdata import string_values, unserialize
from ...records import MenuItem, MenuLocation, Object
from ..loader import BatchLoader, fan_in
from ..models import TermRow, TermTaxonomyRow
from ..query import ObjectQueryOptions
from .base import BaseRepository
from .category import CategoryRepository
from .object import ObjectRepository

LOGGER = logging.getLogger(__name__)

MENU_CACHE_KEY = "menu:{slug}"
MENU_ID_CACHE_KEY = "menu:id:{id}"


def _meta_int(meta: dict[str, str], key: str) -> int:
    try:
        return int(meta.get(key) or 0)
    except ValueError:
        return 0


def build_menu_item(item: Object, meta: dict[str, str]) -> MenuItem:
    """Create a menu item from its object row and ``_menu_item_*`` metadata."""

    return MenuItem(
        id=item.id,
        parent_id=_meta_int(meta, "_menu_item_menu_item_parent"),
        order=item.menu_order,
        title=item.title,
        link=meta.get("_menu_item_url", ""),
        attr=item.excerpt,
        classes=" ".join(string_values(unserialize(meta.get("_menu_item_classes")))),
        target=meta.get("_menu_item_target", ""),
        object_id=_meta_int(meta, "_menu_item_object_id"),
        object=meta.get("_menu_item_object", ""),
        type=meta.get("_menu_item_type", ""),
        xfn=meta.get("_menu_item_xfn", ""),
    )


def _joins_cycle(item: MenuItem, items: dict[int, MenuItem]) -> bool:
    seen = {item.id}
    parent_id = item.parent_id
    while parent_id in items:
        if parent_id in seen:
            return True
        seen.add(parent_id)
        parent_id = items[parent_id].parent_id
    return False


def assemble_menu(items: Iterable[MenuItem]) -> list[MenuItem]:
    """
    Nest items under their parents and sort every level by menu order.

    Items whose parent is not part of the menu, or whose parent chain loops,
    are placed at the top level.
    """

    by_id = {item.id: item for item in items}
    roots: list[MenuItem] = []
    for item in by_id.values():
        if item.parent_id in by_id and not _joins_cycle(item, by_id):
            by_id[item.parent_id].children.append(item)
        else:
            roots.append(item)
    sort_menu_items(roots)
    return roots


def sort_menu_items(items: list[MenuItem]) -> None:
    items.sort(key=lambda item: item.order)
    for item in items:
        if item.children:
            sort_menu_items(item.children)


class MenuRepository(BaseRepository):
    """Builds navigation menu trees."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        loader: BatchLoader,
        settings: Settings | None = None,
        *,
        objects: ObjectRepository,
        categories: CategoryRepository,
    ) -> None:
        super().__init__(session_factory, loader, settings)
        self._objects = objects
        self._categories = categories

    async def get_menu_locations(self) -> list[MenuLocation]:
        """Return every ``nav_menu`` term."""

        rows = await self._rows(
            select(TermRow.term_id, TermRow.name, TermRow.slug)
            .join(TermTaxonomyRow, TermTaxonomyRow.term_id == TermRow.term_id)
            .where(TermTaxonomyRow.taxonomy == Taxonomy.NAV_MENU.value)
            .order_by(TermRow.term_id)
        )
        return [MenuLocation(id=term_id, name=name, slug=slug) for term_id, name, slug in rows]

    async def get_menu_by_id(self, menu_id: int) -> list[MenuItem]:
        """Return the item tree of the menu with the given term id."""

        if not menu_id:
            return []
        return await self._get_menu(
            MENU_ID_CACHE_KEY.format(id=menu_id), ObjectQueryOptions(menu_id=menu_id)
        )

    async def get_menu_by_slug(self, slug: str) -> list[MenuItem]:
        """Return the item tree of the menu with the given slug."""

        if not slug:
            return []
        return await self._get_menu(
            MENU_CACHE_KEY.format(slug=slug), ObjectQueryOptions(menu_name=slug)
        )

    async def _get_menu(self, key: str, options: ObjectQueryOptions) -> list[MenuItem]:
        cached = await self._loader.load_value(key)
        if cached is not None:
            try:
                return [MenuItem.from_cache(item) for item in cached]
            except (KeyError, TypeError, ValueError) as exc:
                LOGGER.warning("Discarding undecodable cached menu %s: %s", key, exc)

        page = await self._objects.query_objects(
            options.model_copy(
                update={
                    "post_type": PostType.NAV_MENU_ITEM.value,
                    "order_by": "menu_order",
                    "order_asc": True,
                    "limit": -1,
                }
            )
        )
        ids = page.to_list()
        if not ids:
            return []

        objects = await self._objects.get_objects(ids)
        meta = await self._objects.get_meta_for(ids)
        items = [build_menu_item(item, meta[item.id]) for item in objects]

        await fan_in(
            self._resolve_item(item) for item in items if item.type != MenuItemType.CUSTOM.value
        )

        tree = assemble_menu(items)
        self._loader.store_value(key, [item.to_cache() for item in tree])
        return tree

    async def _resolve_item(self, item: MenuItem) -> None:
        try:
            if item.type == MenuItemType.TAXONOMY.value:
                if item.object == Taxonomy.CATEGORY.value:
                    [category] = await self._categories.get_categories([item.object_id])
                    item.title = category.name
                    item.link = category.link
            elif item.type == MenuItemType.POST_TYPE.value:
                if item.object == PostType.PAGE.value:
                    await self._resolve_page(item)
                else:
                    await self._resolve_post(item)
        except DependentResolutionError:
            raise
        except WordPressError as exc:
            raise DependentResolutionError(
                f"failed to resolve menu item {item.id}: {item.object} {item.object_id}",
                context={"menu_item": item.id, "object": item.object, "object_id": item.object_id},
            ) from exc

    async def _resolve_page(self, item: MenuItem) -> None:
        path = ""
        seen: set[int] = set()
        page_id = item.object_id
        while page_id:
            if page_id in seen:
                raise DependentResolutionError(
                    f"page {item.object_id} has a cyclic parent chain",
                    context={"menu_item": item.id, "page": page_id},
                )
            seen.add(page_id)
            [page] = await self._objects.get_objects([page_id])
            if not item.title:
                item.title = page.title
            path = f"/{page.name}{path}"
            page_id = page.parent_id
        item.link = path

    async def _resolve_post(self, item: MenuItem) -> None:
        [post] = await self._objects.get_objects([item.object_id])
        if not item.title:
            item.title = post.title
        if post.date is not None:
            item.link = f"/{post.date.year}/{post.date.month}/{post.name}"
        else:
            item.link = f"/{post.name}"


__all__ = [
    "MENU_CACHE_KEY",
    "MENU_ID_CACHE_KEY",
    "MenuRepository",
    "assemble_menu",
    "build_menu_item",
    "sort_menu_items",
]
