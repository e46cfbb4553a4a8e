"""
Option repository for site-wide settings.
"""

from __future__ import annotations

from sqlalchemy import select

from ..models import OptionRow
from .base import BaseRepository


class OptionRepository(BaseRepository):
    """Reads rows of the options table."""

    async def get_option(self, name: str) -> str | None:
        """Return the value of an option, or None when it is not set."""

        values = await self._scalars(
            select(OptionRow.option_value).where(OptionRow.option_name == name).limit(1)
        )
        return values[0] if values else None


__all__ = ["OptionRepository"]
