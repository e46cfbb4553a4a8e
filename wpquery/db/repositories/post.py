"""
Post repository: published posts with metadata and taxonomy memberships.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...config import Settings
from ...enums import Taxonomy
from ...iterator import IdIterator
from ...records import INTERNAL_META_PREFIX, Post
from ..loader import BatchLoader, fan_in
from ..query import ObjectQueryOptions, published_posts
from .base import BaseRepository, Transform
from .object import ObjectRepository

LOGGER = logging.getLogger(__name__)

POST_CACHE_KEY = "post:{id}"
THUMBNAIL_META_KEY = "_thumbnail_id"


class PostRepository(BaseRepository):
    """Resolves posts and their dependent data, cache first."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        loader: BatchLoader,
        settings: Settings | None = None,
        *,
        objects: ObjectRepository,
    ) -> None:
        super().__init__(session_factory, loader, settings)
        self._objects = objects

    async def get_posts(
        self,
        ids: Sequence[int],
        transforms: Sequence[Transform[Post]] = (),
    ) -> list[Post]:
        """
        Return one post per id in input order.

        ``transforms`` run in order over the result list after a database
        load and before the write-back, so cached posts already carry their
        effects.
        """

        return await self._resolve(
            ids,
            key_template=POST_CACHE_KEY,
            record_type=Post,
            fetch=self._fetch_posts,
            transforms=transforms,
        )

    async def query_posts(self, options: ObjectQueryOptions) -> IdIterator:
        """Query published objects, of type ``post`` unless another type is given."""

        return await self._objects.query_objects(published_posts(options))

    async def _fetch_posts(self, ids: list[int]) -> list[Post]:
        objects = await self._objects.get_objects(ids)
        posts = [Post(**item.object_fields()) for item in objects]

        await fan_in(
            task
            for post in posts
            for task in (
                self._load_meta(post),
                self._load_category_ids(post),
                self._load_tag_ids(post),
            )
        )
        LOGGER.debug("Loaded %d posts from the database", len(posts))
        return posts

    async def _load_meta(self, post: Post) -> None:
        meta = await self._objects.get_meta(post.id)

        thumbnail = meta.pop(THUMBNAIL_META_KEY, "")
        try:
            post.featured_media_id = int(thumbnail) if thumbnail else 0
        except ValueError:
            LOGGER.debug("Post %d has a non-numeric thumbnail id %r", post.id, thumbnail)
            post.featured_media_id = 0

        post.meta = {
            key: value for key, value in meta.items() if not key.startswith(INTERNAL_META_PREFIX)
        }

    async def _load_category_ids(self, post: Post) -> None:
        ids = await self._objects.get_taxonomy(post.id, Taxonomy.CATEGORY)
        post.category_ids = ids.to_list()

    async def _load_tag_ids(self, post: Post) -> None:
        ids = await self._objects.get_taxonomy(post.id, Taxonomy.POST_TAG)
        post.tag_ids = ids.to_list()


__all__ = ["POST_CACHE_KEY", "PostRepository"]
