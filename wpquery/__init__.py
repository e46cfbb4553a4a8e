"""
Read-only, cache-aside access to WordPress content databases.
"""

from .config import Settings, get_settings
from .db.query import ObjectQueryOptions, TermQueryOptions, UserQueryOptions
from .enums import MenuItemType, PostStatus, PostType, Taxonomy
from .exceptions import (
    CacheError,
    DependentResolutionError,
    InvalidQueryError,
    MissingResourcesError,
    SlugNotFoundError,
    TaxonomyCycleError,
    WordPressError,
)
from .iterator import IdIterator
from .reader import ContentReader
from .records import Attachment, Category, MenuItem, MenuLocation, Object, Post, Tag, Term, User

__all__ = [
    "Attachment",
    "CacheError",
    "Category",
    "ContentReader",
    "DependentResolutionError",
    "IdIterator",
    "InvalidQueryError",
    "MenuItem",
    "MenuItemType",
    "MenuLocation",
    "MissingResourcesError",
    "Object",
    "ObjectQueryOptions",
    "Post",
    "PostStatus",
    "PostType",
    "Settings",
    "SlugNotFoundError",
    "Tag",
    "TaxonomyCycleError",
    "Taxonomy",
    "Term",
    "TermQueryOptions",
    "User",
    "UserQueryOptions",
    "WordPressError",
    "get_settings",
]
