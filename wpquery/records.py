"""
Hydrated record types returned by the repositories.

Each record kind owns an explicit cache codec: ``to_cache`` produces a
JSON-compatible dict and ``from_cache`` rebuilds the record from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any

# Metadata keys starting with this marker are internal and never exposed.
INTERNAL_META_PREFIX = "_"


def _dump_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _load_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass(slots=True)
class Object:
    """
    A row of the posts table.

    Not necessarily a blog post: pages, attachments and menu items all live
    in the same table and share these columns.
    """

    id: int
    author_id: int
    date: datetime | None
    date_gmt: datetime | None
    content: str
    title: str
    excerpt: str
    status: str
    comment_status: bool
    ping_status: bool
    password: str
    name: str
    to_ping: list[str]
    pinged: list[str]
    modified: datetime | None
    modified_gmt: datetime | None
    content_filtered: str
    parent_id: int
    guid: str
    menu_order: int
    type: str
    mime_type: str
    comment_count: int

    def to_cache(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "author_id": self.author_id,
            "date": _dump_datetime(self.date),
            "date_gmt": _dump_datetime(self.date_gmt),
            "content": self.content,
            "title": self.title,
            "excerpt": self.excerpt,
            "status": self.status,
            "comment_status": self.comment_status,
            "ping_status": self.ping_status,
            "password": self.password,
            "name": self.name,
            "to_ping": list(self.to_ping),
            "pinged": list(self.pinged),
            "modified": _dump_datetime(self.modified),
            "modified_gmt": _dump_datetime(self.modified_gmt),
            "content_filtered": self.content_filtered,
            "parent_id": self.parent_id,
            "guid": self.guid,
            "menu_order": self.menu_order,
            "type": self.type,
            "mime_type": self.mime_type,
            "comment_count": self.comment_count,
        }

    @classmethod
    def _object_kwargs(cls, payload: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": int(payload["id"]),
            "author_id": int(payload["author_id"]),
            "date": _load_datetime(payload["date"]),
            "date_gmt": _load_datetime(payload["date_gmt"]),
            "content": payload["content"],
            "title": payload["title"],
            "excerpt": payload["excerpt"],
            "status": payload["status"],
            "comment_status": bool(payload["comment_status"]),
            "ping_status": bool(payload["ping_status"]),
            "password": payload["password"],
            "name": payload["name"],
            "to_ping": list(payload["to_ping"]),
            "pinged": list(payload["pinged"]),
            "modified": _load_datetime(payload["modified"]),
            "modified_gmt": _load_datetime(payload["modified_gmt"]),
            "content_filtered": payload["content_filtered"],
            "parent_id": int(payload["parent_id"]),
            "guid": payload["guid"],
            "menu_order": int(payload["menu_order"]),
            "type": payload["type"],
            "mime_type": payload["mime_type"],
            "comment_count": int(payload["comment_count"]),
        }

    @classmethod
    def from_cache(cls, payload: dict[str, Any]) -> Object:
        return cls(**cls._object_kwargs(payload))

    def object_fields(self) -> dict[str, Any]:
        """Return the shared post-row columns as constructor keyword arguments."""

        return {item.name: getattr(self, item.name) for item in fields(Object)}


@dataclass(slots=True)
class Post(Object):
    """A published post with its metadata and taxonomy memberships."""

    featured_media_id: int = 0
    category_ids: list[int] = field(default_factory=list)
    tag_ids: list[int] = field(default_factory=list)
    meta: dict[str, str] = field(default_factory=dict)

    def to_cache(self) -> dict[str, Any]:
        payload = Object.to_cache(self)
        payload.update(
            featured_media_id=self.featured_media_id,
            category_ids=list(self.category_ids),
            tag_ids=list(self.tag_ids),
            meta=dict(self.meta),
        )
        return payload

    @classmethod
    def from_cache(cls, payload: dict[str, Any]) -> Post:
        return cls(
            **cls._object_kwargs(payload),
            featured_media_id=int(payload.get("featured_media_id", 0)),
            category_ids=[int(item) for item in payload.get("category_ids", [])],
            tag_ids=[int(item) for item in payload.get("tag_ids", [])],
            meta=dict(payload.get("meta", {})),
        )


@dataclass(slots=True)
class Attachment(Object):
    """An uploaded media file."""

    file_name: str = ""
    width: int = 0
    height: int = 0
    caption: str = ""
    alt_text: str = ""
    url: str = ""

    def to_cache(self) -> dict[str, Any]:
        payload = Object.to_cache(self)
        payload.update(
            file_name=self.file_name,
            width=self.width,
            height=self.height,
            caption=self.caption,
            alt_text=self.alt_text,
            url=self.url,
        )
        return payload

    @classmethod
    def from_cache(cls, payload: dict[str, Any]) -> Attachment:
        return cls(
            **cls._object_kwargs(payload),
            file_name=payload.get("file_name", ""),
            width=int(payload.get("width", 0)),
            height=int(payload.get("height", 0)),
            caption=payload.get("caption", ""),
            alt_text=payload.get("alt_text", ""),
            url=payload.get("url", ""),
        )


@dataclass(slots=True)
class Term:
    """A single classification value within a taxonomy."""

    id: int
    name: str
    slug: str
    group: int
    taxonomy_id: int
    taxonomy: str
    description: str
    parent: int
    count: int

    def to_cache(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "group": self.group,
            "taxonomy_id": self.taxonomy_id,
            "taxonomy": self.taxonomy,
            "description": self.description,
            "parent": self.parent,
            "count": self.count,
        }

    @classmethod
    def _term_kwargs(cls, payload: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": int(payload["id"]),
            "name": payload["name"],
            "slug": payload["slug"],
            "group": int(payload["group"]),
            "taxonomy_id": int(payload["taxonomy_id"]),
            "taxonomy": payload["taxonomy"],
            "description": payload["description"],
            "parent": int(payload["parent"]),
            "count": int(payload["count"]),
        }

    @classmethod
    def from_cache(cls, payload: dict[str, Any]) -> Term:
        return cls(**cls._term_kwargs(payload))

    def term_fields(self) -> dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in fields(Term)}


@dataclass(slots=True)
class Category(Term):
    """A hierarchical term whose link is the slug path of its parent chain."""

    link: str = ""

    def to_cache(self) -> dict[str, Any]:
        payload = Term.to_cache(self)
        payload["link"] = self.link
        return payload

    @classmethod
    def from_cache(cls, payload: dict[str, Any]) -> Category:
        return cls(**cls._term_kwargs(payload), link=payload.get("link", ""))


@dataclass(slots=True)
class Tag(Term):
    """A flat term linked at ``/tag/{slug}``."""

    link: str = ""

    def to_cache(self) -> dict[str, Any]:
        payload = Term.to_cache(self)
        payload["link"] = self.link
        return payload

    @classmethod
    def from_cache(cls, payload: dict[str, Any]) -> Tag:
        return cls(**cls._term_kwargs(payload), link=payload.get("link", ""))


@dataclass(slots=True)
class User:
    """A site author."""

    id: int
    slug: str
    name: str
    description: str
    email: str
    gravatar: str
    website: str
    registered: datetime | None

    def to_cache(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "description": self.description,
            "email": self.email,
            "gravatar": self.gravatar,
            "website": self.website,
            "registered": _dump_datetime(self.registered),
        }

    @classmethod
    def from_cache(cls, payload: dict[str, Any]) -> User:
        return cls(
            id=int(payload["id"]),
            slug=payload["slug"],
            name=payload["name"],
            description=payload["description"],
            email=payload["email"],
            gravatar=payload["gravatar"],
            website=payload["website"],
            registered=_load_datetime(payload["registered"]),
        )


@dataclass(slots=True)
class MenuItem:
    """One entry of a navigation menu tree."""

    id: int
    parent_id: int = 0
    order: int = 0
    title: str = ""
    link: str = ""
    attr: str = ""
    classes: str = ""
    target: str = ""
    object_id: int = 0
    object: str = ""
    type: str = ""
    xfn: str = ""
    children: list[MenuItem] = field(default_factory=list)

    def to_cache(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "parent_id": self.parent_id,
            "order": self.order,
            "title": self.title,
            "link": self.link,
            "attr": self.attr,
            "classes": self.classes,
            "target": self.target,
            "object_id": self.object_id,
            "object": self.object,
            "type": self.type,
            "xfn": self.xfn,
            "children": [child.to_cache() for child in self.children],
        }

    @classmethod
    def from_cache(cls, payload: dict[str, Any]) -> MenuItem:
        return cls(
            id=int(payload["id"]),
            parent_id=int(payload.get("parent_id", 0)),
            order=int(payload.get("order", 0)),
            title=payload.get("title", ""),
            link=payload.get("link", ""),
            attr=payload.get("attr", ""),
            classes=payload.get("classes", ""),
            target=payload.get("target", ""),
            object_id=int(payload.get("object_id", 0)),
            object=payload.get("object", ""),
            type=payload.get("type", ""),
            xfn=payload.get("xfn", ""),
            children=[cls.from_cache(child) for child in payload.get("children", [])],
        )


@dataclass(slots=True)
class MenuLocation:
    """A navigation menu (a ``nav_menu`` term)."""

    id: int
    name: str
    slug: str


__all__ = [
    "Attachment",
    "Category",
    "INTERNAL_META_PREFIX",
    "MenuItem",
    "MenuLocation",
    "Object",
    "Post",
    "Tag",
    "Term",
    "User",
]
