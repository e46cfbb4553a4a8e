"""
SQLAlchemy ORM models describing the content schema (posts, terms, users, options).

The package only reads these tables; the models exist to build statements.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

TABLE_PREFIX = "wp_"

# SQLite only autoincrements INTEGER primary keys.
Identifier = BigInteger().with_variant(Integer, "sqlite")


class Base(AsyncAttrs, DeclarativeBase):
    """Declarative base that enables async-friendly ORM operations."""

    pass


class PostRow(Base):
    """A row of the posts table: posts, pages, attachments and menu items."""

    __tablename__ = f"{TABLE_PREFIX}posts"

    id: Mapped[int] = mapped_column("ID", Identifier, primary_key=True, autoincrement=True)
    post_author: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    post_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    post_date_gmt: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    post_content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    post_title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    post_excerpt: Mapped[str] = mapped_column(Text, nullable=False, default="")
    post_status: Mapped[str] = mapped_column(String(20), nullable=False, default="publish")
    comment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="open")
    ping_status: Mapped[str] = mapped_column(String(20), nullable=False, default="open")
    post_password: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    post_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    to_ping: Mapped[str] = mapped_column(Text, nullable=False, default="")
    pinged: Mapped[str] = mapped_column(Text, nullable=False, default="")
    post_modified: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    post_modified_gmt: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    post_content_filtered: Mapped[str] = mapped_column(Text, nullable=False, default="")
    post_parent: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    guid: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    menu_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    post_type: Mapped[str] = mapped_column(String(20), nullable=False, default="post")
    post_mime_type: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    comment_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    __table_args__ = (
        Index("type_status_date", "post_type", "post_status", "post_date", "ID"),
        Index("post_parent", "post_parent"),
        Index("post_author", "post_author"),
        Index("post_name", "post_name"),
    )


class PostMetaRow(Base):
    """Key/value metadata attached to a posts row."""

    __tablename__ = f"{TABLE_PREFIX}postmeta"

    meta_id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    meta_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meta_value: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("postmeta_post_id", "post_id"),
        Index("postmeta_meta_key", "meta_key"),
    )


class TermRow(Base):
    """A term: name and slug, independent of taxonomy."""

    __tablename__ = f"{TABLE_PREFIX}terms"

    term_id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    slug: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    term_group: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    __table_args__ = (
        Index("terms_slug", "slug"),
        Index("terms_name", "name"),
    )


class TermTaxonomyRow(Base):
    """Places a term within a taxonomy, with its parent and usage count."""

    __tablename__ = f"{TABLE_PREFIX}term_taxonomy"

    term_taxonomy_id: Mapped[int] = mapped_column(
        Identifier, primary_key=True, autoincrement=True
    )
    term_id: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    taxonomy: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    parent: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("term_id", "taxonomy", name="term_id_taxonomy"),
        Index("term_taxonomy_taxonomy", "taxonomy"),
        Index("term_taxonomy_parent", "parent"),
    )


class TermRelationshipRow(Base):
    """Links a posts row to a term taxonomy entry."""

    __tablename__ = f"{TABLE_PREFIX}term_relationships"

    object_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    term_taxonomy_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    term_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (Index("term_relationships_term_taxonomy_id", "term_taxonomy_id"),)


class UserRow(Base):
    """A registered user."""

    __tablename__ = f"{TABLE_PREFIX}users"

    id: Mapped[int] = mapped_column("ID", Identifier, primary_key=True, autoincrement=True)
    user_login: Mapped[str] = mapped_column(String(60), nullable=False, default="")
    user_pass: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    user_nicename: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    user_email: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    user_url: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    user_registered: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    user_activation_key: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    user_status: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    display_name: Mapped[str] = mapped_column(String(250), nullable=False, default="")

    __table_args__ = (
        Index("user_nicename", "user_nicename"),
        Index("user_email", "user_email"),
    )


class UserMetaRow(Base):
    """Key/value metadata attached to a user."""

    __tablename__ = f"{TABLE_PREFIX}usermeta"

    umeta_id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    meta_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meta_value: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("usermeta_user_id", "user_id"),
        Index("usermeta_meta_key", "meta_key"),
    )


class OptionRow(Base):
    """A site-wide setting."""

    __tablename__ = f"{TABLE_PREFIX}options"

    option_id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    option_name: Mapped[str] = mapped_column(String(191), nullable=False, unique=True)
    option_value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    autoload: Mapped[str] = mapped_column(String(20), nullable=False, default="yes")


__all__ = [
    "Base",
    "OptionRow",
    "PostMetaRow",
    "PostRow",
    "TABLE_PREFIX",
    "TermRelationshipRow",
    "TermRow",
    "TermTaxonomyRow",
    "UserMetaRow",
    "UserRow",
]
