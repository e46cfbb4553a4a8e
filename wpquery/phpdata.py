"""
Decoding of PHP-serialized metadata values.
"""

from __future__ import annotations

import logging
from typing import Any

import phpserialize

LOGGER = logging.getLogger(__name__)


def unserialize(value: str | None) -> Any | None:
    """Decode a PHP-serialized string; malformed or empty input yields None."""

    if not value:
        return None
    try:
        return phpserialize.loads(value.encode("utf-8"), decode_strings=True)
    except ValueError as exc:
        LOGGER.debug("Ignoring malformed serialized value %.40r: %s", value, exc)
        return None


def string_values(value: Any) -> list[str]:
    """Return the string members of a decoded PHP array, in array order."""

    if not isinstance(value, dict):
        return []
    return [item for item in value.values() if isinstance(item, str)]


__all__ = ["string_values", "unserialize"]
