"""
User repository for site authors.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Sequence

from sqlalchemy import and_, select

from ...exceptions import MissingResourcesError
from ...iterator import IdIterator
from ...records import User
from ..models import UserMetaRow, UserRow
from ..query import UserQueryBuilder, UserQueryOptions
from .base import BaseRepository

LOGGER = logging.getLogger(__name__)

USER_CACHE_KEY = "user:{id}"
DESCRIPTION_META_KEY = "description"


def gravatar_hash(email: str) -> str:
    """Return the gravatar hash of an email address."""

    return hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()


class UserRepository(BaseRepository):
    """Data access helpers for users."""

    async def get_users(self, ids: Sequence[int]) -> list[User]:
        """Return one user per id in input order."""

        return await self._resolve(
            ids,
            key_template=USER_CACHE_KEY,
            record_type=User,
            fetch=self._fetch_users,
        )

    async def query_users(self, options: UserQueryOptions) -> IdIterator:
        """Return the ids of the users matching the options, ordered by id."""

        builder = UserQueryBuilder(default_limit=self._settings.query.default_limit)
        return await self._query_ids(builder.build(options), options.after)

    async def _fetch_users(self, ids: list[int]) -> list[User]:
        # Users without a description row are still returned.
        stmt = (
            select(
                UserRow.id,
                UserRow.user_nicename,
                UserRow.display_name,
                UserMetaRow.meta_value,
                UserRow.user_email,
                UserRow.user_url,
                UserRow.user_registered,
            )
            .outerjoin(
                UserMetaRow,
                and_(
                    UserMetaRow.user_id == UserRow.id,
                    UserMetaRow.meta_key == DESCRIPTION_META_KEY,
                ),
            )
            .where(UserRow.id.in_(ids))
            .order_by(UserRow.id, UserMetaRow.umeta_id)
        )

        found: dict[int, User] = {}
        for user_id, slug, name, description, email, website, registered in await self._rows(stmt):
            if user_id in found:
                continue
            found[user_id] = User(
                id=user_id,
                slug=slug,
                name=name,
                description=description or "",
                email=email,
                gravatar=gravatar_hash(email),
                website=website,
                registered=registered,
            )

        missing = [item for item in ids if item not in found]
        if missing:
            raise MissingResourcesError(missing)
        return [found[item] for item in ids]


__all__ = ["USER_CACHE_KEY", "UserRepository", "gravatar_hash"]
