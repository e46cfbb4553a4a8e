"""
Attachment repository: uploaded media with decoded file metadata.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...config import Settings
from ...enums import PostType
from ...iterator import IdIterator
from ...phpdata import unserialize
from ...records import Attachment
from ..loader import BatchLoader
from ..query import ObjectQueryOptions
from .base import BaseRepository, Transform
from .object import ObjectRepository
from .option import OptionRepository

LOGGER = logging.getLogger(__name__)

ATTACHMENT_CACHE_KEY = "attachment:{id}"
ATTACHMENT_META_KEY = "_wp_attachment_metadata"


def _int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def apply_attachment_metadata(attachment: Attachment, raw: str | None) -> None:
    """Fill file, dimensions, caption and alt text from serialized metadata."""

    meta = unserialize(raw)
    if not isinstance(meta, dict):
        return

    if isinstance(meta.get("file"), str):
        attachment.file_name = meta["file"]
    attachment.width = _int(meta.get("width"))
    attachment.height = _int(meta.get("height"))

    image_meta = meta.get("image_meta")
    if isinstance(image_meta, dict):
        if isinstance(image_meta.get("caption"), str):
            attachment.caption = image_meta["caption"]
        if isinstance(image_meta.get("title"), str):
            attachment.alt_text = image_meta["title"]


class AttachmentRepository(BaseRepository):
    """Resolves attachments, cache first, with their public URLs."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        loader: BatchLoader,
        settings: Settings | None = None,
        *,
        objects: ObjectRepository,
        options: OptionRepository,
    ) -> None:
        super().__init__(session_factory, loader, settings)
        self._objects = objects
        self._options = options

    async def get_attachments(
        self,
        ids: Sequence[int],
        transforms: Sequence[Transform[Attachment]] = (),
    ) -> list[Attachment]:
        """Return one attachment per id in input order."""

        return await self._resolve(
            ids,
            key_template=ATTACHMENT_CACHE_KEY,
            record_type=Attachment,
            fetch=self._fetch_attachments,
            transforms=transforms,
        )

    async def query_attachments(self, options: ObjectQueryOptions) -> IdIterator:
        """Query objects of type ``attachment``."""

        return await self._objects.query_objects(
            options.model_copy(update={"post_type": PostType.ATTACHMENT.value})
        )

    async def upload_base_url(self) -> str:
        """
        Return the base URL uploads are served from.

        ``upload_url_path`` wins when set; otherwise the site URL joined with
        ``upload_path`` (or the default upload directory).
        """

        base_url = await self._options.get_option("upload_url_path")
        if base_url:
            return base_url.rstrip("/")

        site_url = await self._options.get_option("siteurl") or ""
        upload_path = await self._options.get_option("upload_path")
        if not upload_path:
            upload_path = self._settings.query.upload_path
        return f"{site_url.rstrip('/')}/{upload_path.strip('/')}"

    async def _fetch_attachments(self, ids: list[int]) -> list[Attachment]:
        objects = await self._objects.get_objects(ids)
        meta = await self._objects.get_meta_for(ids, ATTACHMENT_META_KEY)
        base_url = await self.upload_base_url()

        attachments = []
        for item in objects:
            attachment = Attachment(**item.object_fields())
            apply_attachment_metadata(attachment, meta[item.id].get(ATTACHMENT_META_KEY))
            if attachment.file_name:
                folder = attachment.date.strftime("/%Y/%m/") if attachment.date else "/"
                attachment.url = f"{base_url}{folder}{attachment.file_name}"
            attachments.append(attachment)
        return attachments


__all__ = [
    "ATTACHMENT_CACHE_KEY",
    "AttachmentRepository",
    "apply_attachment_metadata",
]
