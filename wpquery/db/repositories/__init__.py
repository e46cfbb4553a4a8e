"""
Repository classes for database access.

This module provides specialized repositories for different record kinds:
- TermRepository: terms, term queries and the category hierarchy
- ObjectRepository: raw posts-table rows, metadata and term links
- CategoryRepository / TagRepository: linked taxonomy terms
- PostRepository / AttachmentRepository: hydrated posts and media
- UserRepository, OptionRepository, MenuRepository
"""

from .attachment import AttachmentRepository
from .base import BaseRepository, Transform
from .category import CategoryRepository, TagRepository
from .menu import MenuRepository
from .object import ObjectRepository
from .option import OptionRepository
from .post import PostRepository
from .term import TermRepository
from .user import UserRepository

__all__ = [
    "AttachmentRepository",
    "BaseRepository",
    "CategoryRepository",
    "MenuRepository",
    "ObjectRepository",
    "OptionRepository",
    "PostRepository",
    "TagRepository",
    "TermRepository",
    "Transform",
    "UserRepository",
]
