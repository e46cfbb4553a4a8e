"""
Read-only facade over the content database and its record cache.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from .config import Settings, get_settings
from .db.cache import RecordCache
from .db.loader import BackgroundTasks, BatchLoader
from .db.query import ObjectQueryOptions, TermQueryOptions, UserQueryOptions
from .db.repositories import (
    AttachmentRepository,
    CategoryRepository,
    MenuRepository,
    ObjectRepository,
    OptionRepository,
    PostRepository,
    TagRepository,
    TermRepository,
    Transform,
    UserRepository,
)
from .db.session import create_engine, create_redis, create_session_factory
from .enums import Taxonomy
from .iterator import IdIterator
from .records import Attachment, Category, MenuItem, MenuLocation, Object, Post, Tag, Term, User

LOGGER = logging.getLogger(__name__)


class ContentReader:
    """
    Entry point for every read operation.

    Holds one session factory, an optional record cache and the background
    task set that cache write-backs run on. Call ``aclose`` on shutdown to
    flush pending write-backs and release connections.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        cache: RecordCache | None = None,
        *,
        settings: Settings | None = None,
        engine: AsyncEngine | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._engine = engine
        self._background = BackgroundTasks()

        if not self._settings.cache.enabled:
            cache = None
        self._cache = cache
        self.loader = BatchLoader(
            cache, read_enabled=not self._settings.cache.flush, background=self._background
        )

        shared = (session_factory, self.loader, self._settings)
        self.terms = TermRepository(*shared)
        self.objects = ObjectRepository(*shared, terms=self.terms)
        self.options = OptionRepository(*shared)
        self.categories = CategoryRepository(*shared, terms=self.terms)
        self.tags = TagRepository(*shared, terms=self.terms)
        self.posts = PostRepository(*shared, objects=self.objects)
        self.attachments = AttachmentRepository(*shared, objects=self.objects, options=self.options)
        self.users = UserRepository(*shared)
        self.menus = MenuRepository(*shared, objects=self.objects, categories=self.categories)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ContentReader:
        """Create the engine, session factory and (if enabled) cache client."""

        settings = settings or get_settings()
        engine = create_engine(settings)
        cache = None
        if settings.cache.enabled:
            cache = RecordCache(
                create_redis(settings),
                namespace=settings.cache.namespace,
                ttl_seconds=settings.cache.ttl_seconds,
            )
        LOGGER.info(
            "Content reader ready (cache %s)", "enabled" if cache is not None else "disabled"
        )
        return cls(create_session_factory(engine), cache, settings=settings, engine=engine)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def background(self) -> BackgroundTasks:
        return self._background

    async def aclose(self) -> None:
        """Wait for pending cache write-backs, then release the engine and cache."""

        await self._background.join()
        if self._cache is not None:
            await self._cache.aclose()
        if self._engine is not None:
            await self._engine.dispose()
        LOGGER.info("Content reader closed")

    async def __aenter__(self) -> ContentReader:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # Objects and terms

    async def get_objects(self, ids: Sequence[int]) -> list[Object]:
        return await self.objects.get_objects(ids)

    async def get_meta(self, object_id: int, *keys: str) -> dict[str, str]:
        return await self.objects.get_meta(object_id, *keys)

    async def get_taxonomy(self, object_id: int, *taxonomies: Taxonomy) -> IdIterator:
        return await self.objects.get_taxonomy(object_id, *taxonomies)

    async def query_objects(self, options: ObjectQueryOptions) -> IdIterator:
        return await self.objects.query_objects(options)

    async def get_terms(self, ids: Sequence[int]) -> list[Term]:
        return await self.terms.get_terms(ids)

    async def query_terms(self, options: TermQueryOptions) -> IdIterator:
        return await self.terms.query_terms(options)

    async def get_option(self, name: str) -> str | None:
        return await self.options.get_option(name)

    # Taxonomies

    async def get_categories(self, ids: Sequence[int]) -> list[Category]:
        return await self.categories.get_categories(ids)

    async def get_category_id_by_slug(self, slug: str) -> int:
        return await self.terms.get_category_id_by_slug(slug)

    async def get_category_descendant_ids(self, category_id: int) -> list[int]:
        return await self.terms.get_descendant_ids(category_id)

    async def get_category_child_id(self, parent_id: int, slug: str) -> int | None:
        return await self.terms.get_child_id(parent_id, slug)

    async def get_tags(self, ids: Sequence[int]) -> list[Tag]:
        return await self.tags.get_tags(ids)

    # Content

    async def get_posts(
        self, ids: Sequence[int], transforms: Sequence[Transform[Post]] = ()
    ) -> list[Post]:
        return await self.posts.get_posts(ids, transforms)

    async def query_posts(self, options: ObjectQueryOptions) -> IdIterator:
        return await self.posts.query_posts(options)

    async def get_attachments(
        self, ids: Sequence[int], transforms: Sequence[Transform[Attachment]] = ()
    ) -> list[Attachment]:
        return await self.attachments.get_attachments(ids, transforms)

    async def query_attachments(self, options: ObjectQueryOptions) -> IdIterator:
        return await self.attachments.query_attachments(options)

    async def get_users(self, ids: Sequence[int]) -> list[User]:
        return await self.users.get_users(ids)

    async def query_users(self, options: UserQueryOptions) -> IdIterator:
        return await self.users.query_users(options)

    # Menus

    async def get_menu_locations(self) -> list[MenuLocation]:
        return await self.menus.get_menu_locations()

    async def get_menu_by_id(self, menu_id: int) -> list[MenuItem]:
        return await self.menus.get_menu_by_id(menu_id)

    async def get_menu_by_slug(self, slug: str) -> list[MenuItem]:
        return await self.menus.get_menu_by_slug(slug)


__all__ = ["ContentReader"]
