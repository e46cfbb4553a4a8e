"""
Enumerations for the string codes stored in the content schema.
"""

from __future__ import annotations

from enum import Enum


class PostStatus(str, Enum):
    """Publication state of a post row."""

    PUBLISH = "publish"
    # Published, but with a publish date in the future.
    FUTURE = "future"
    DRAFT = "draft"
    # Awaiting approval.
    PENDING = "pending"
    PRIVATE = "private"
    TRASH = "trash"
    AUTO_DRAFT = "auto-draft"
    # Takes its status from the parent row (attachments, revisions).
    INHERIT = "inherit"


class PostType(str, Enum):
    """Kinds of rows stored in the posts table."""

    ATTACHMENT = "attachment"
    NAV_MENU_ITEM = "nav_menu_item"
    PAGE = "page"
    POST = "post"
    REVISION = "revision"


class MenuItemType(str, Enum):
    """What a navigation menu item links to."""

    POST_TYPE = "post_type"
    TAXONOMY = "taxonomy"
    CUSTOM = "custom"


class Taxonomy(str, Enum):
    """Built-in term taxonomies."""

    CATEGORY = "category"
    NAV_MENU = "nav_menu"
    POST_TAG = "post_tag"


__all__ = ["MenuItemType", "PostStatus", "PostType", "Taxonomy"]
