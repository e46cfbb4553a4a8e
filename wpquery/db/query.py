"""
Query option models and the statement builders behind the ``query_*`` operations.

Every filter axis accepts up to four mutually exclusive forms, checked in a
fixed priority: exact value, "and" list, "in" list, "not in" list. The first
populated form wins. Falsy values (0, "", empty list) mean "not specified".

Pagination is cursor based: each row carries the raw value of the ordering
column, which is base64-encoded into the resume cursor for the next page.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from collections.abc import Sequence
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import (
    ColumnElement,
    Select,
    and_,
    extract,
    false,
    or_,
    select,
)
from sqlalchemy.engine import Dialect
from sqlalchemy.sql.schema import Column

from ..enums import PostStatus, PostType, Taxonomy
from ..exceptions import InvalidQueryError, SlugNotFoundError
from .models import (
    PostMetaRow,
    PostRow,
    TermRelationshipRow,
    TermRow,
    TermTaxonomyRow,
    UserRow,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
DEFAULT_OBJECT_ORDER = "post_date"

_DISALLOWED_IDENTIFIER_CHARS = re.compile(r"[^0-9A-Za-z_]")
_CATEGORY_NAME_TOKEN = re.compile(r"([,+~]?)([^,+~]+)")
# Runs of anything that is not a letter.
_SEARCH_SEPARATOR = re.compile(r"[\W\d_]+")
_MIN_SEARCH_TOKEN_LENGTH = 3


# -----------------------------------------------------------------------------
# Cursors
# -----------------------------------------------------------------------------


def encode_cursor(value: Any) -> str:
    """Encode an ordering-column value into an opaque, URL-safe cursor."""

    text = value.isoformat(sep=" ") if isinstance(value, datetime) else str(value)
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str | None) -> str | None:
    """Return the raw ordering value of a cursor, or None if it is absent or malformed."""

    if not cursor:
        return None
    try:
        return base64.b64decode(cursor.encode("ascii"), altchars=b"-_", validate=True).decode(
            "utf-8"
        )
    except (binascii.Error, ValueError):
        return None


def _cursor_value(column: ColumnElement[Any], raw: str) -> Any:
    """Coerce a decoded cursor to the Python type of the ordering column."""

    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw
    if python_type is datetime:
        return datetime.fromisoformat(raw)
    if python_type is int:
        return int(raw)
    if python_type is float:
        return float(raw)
    return raw


def _paginate(
    stmt: Select[Any],
    column: ColumnElement[Any],
    *,
    after: str | None,
    ascending: bool,
    limit: int | None,
    default_limit: int,
) -> Select[Any]:
    raw = decode_cursor(after)
    if raw is not None:
        try:
            value = _cursor_value(column, raw)
        except ValueError:
            LOGGER.debug("Ignoring cursor %r that does not fit the ordering column", after)
        else:
            stmt = stmt.where(column > value if ascending else column < value)
    elif after:
        LOGGER.debug("Ignoring malformed cursor %r", after)

    stmt = stmt.order_by(column.asc() if ascending else column.desc())

    if not limit:
        limit = default_limit
    if limit > 0:
        stmt = stmt.limit(limit)
    return stmt


def sanitize_identifier(name: str) -> str:
    """Strip everything but letters, digits and underscores (and any table alias)."""

    return _DISALLOWED_IDENTIFIER_CHARS.sub("", name.rsplit(".", 1)[-1])


def to_sql(stmt: Select[Any], dialect: Dialect | None = None) -> tuple[str, dict[str, Any]]:
    """Render a statement into SQL text and its bound parameters."""

    compiled = stmt.compile(dialect=dialect)
    return str(compiled), dict(compiled.params)


# -----------------------------------------------------------------------------
# Option models
# -----------------------------------------------------------------------------


class _QueryOptions(BaseModel):
    """Pagination fields shared by every option model."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    after: str | None = Field(default=None, description="Cursor of the last row already seen.")
    limit: int = Field(default=0, description="Page size; 0 uses the default, negative is unbounded.")


class ObjectQueryOptions(_QueryOptions):
    """Filters for rows of the posts table."""

    order_by: str = Field(default="", description="Ordering column, post_date by default.")
    order_asc: bool = False

    post_type: str | None = None
    post_status: str | None = None

    author: int = Field(default=0, alias="author_id")
    author_in: list[int] = Field(default_factory=list, alias="author_id__in")
    author_not_in: list[int] = Field(default_factory=list, alias="author_id__not_in")

    author_name: str = ""
    author_name_in: list[str] = Field(default_factory=list, alias="author_name__in")
    author_name_not_in: list[str] = Field(default_factory=list, alias="author_name__not_in")

    category: int = Field(default=0, alias="category_id")
    category_and: list[int] = Field(default_factory=list, alias="category_id__and")
    category_in: list[int] = Field(default_factory=list, alias="category_id__in")
    category_not_in: list[int] = Field(default_factory=list, alias="category_id__not_in")

    # "news,+tech~sports": plain or ","-prefixed names are "in", "+" is "and", "~" is "not in".
    category_name: str = ""
    category_name_and: list[str] = Field(default_factory=list, alias="category_name__and")
    category_name_in: list[str] = Field(default_factory=list, alias="category_name__in")
    category_name_not_in: list[str] = Field(default_factory=list, alias="category_name__not_in")

    menu_id: int = 0
    menu_id_and: list[int] = Field(default_factory=list, alias="menu_id__and")
    menu_id_in: list[int] = Field(default_factory=list, alias="menu_id__in")
    menu_id_not_in: list[int] = Field(default_factory=list, alias="menu_id__not_in")

    menu_name: str = ""
    menu_name_and: list[str] = Field(default_factory=list, alias="menu_name__and")
    menu_name_in: list[str] = Field(default_factory=list, alias="menu_name__in")
    menu_name_not_in: list[str] = Field(default_factory=list, alias="menu_name__not_in")

    # Entries are "key" or "key=value".
    meta: str = ""
    meta_and: list[str] = Field(default_factory=list, alias="meta__and")
    meta_in: list[str] = Field(default_factory=list, alias="meta__in")
    meta_not_in: list[str] = Field(default_factory=list, alias="meta__not_in")

    name: str = Field(default="", alias="post_name")
    name_in: list[str] = Field(default_factory=list, alias="post_name__in")
    name_not_in: list[str] = Field(default_factory=list, alias="post_name__not_in")

    parent: int = Field(default=0, alias="post_parent")
    parent_in: list[int] = Field(default_factory=list, alias="post_parent__in")
    parent_not_in: list[int] = Field(default_factory=list, alias="post_parent__not_in")

    post: int = Field(default=0, alias="post_id")
    post_in: list[int] = Field(default_factory=list, alias="post_id__in")
    post_not_in: list[int] = Field(default_factory=list, alias="post_id__not_in")

    tag_id: int = 0
    tag_id_and: list[int] = Field(default_factory=list, alias="tag_id__and")
    tag_id_in: list[int] = Field(default_factory=list, alias="tag_id__in")
    tag_id_not_in: list[int] = Field(default_factory=list, alias="tag_id__not_in")

    tag_name: str = ""
    tag_name_and: list[str] = Field(default_factory=list, alias="tag_name__and")
    tag_name_in: list[str] = Field(default_factory=list, alias="tag_name__in")
    tag_name_not_in: list[str] = Field(default_factory=list, alias="tag_name__not_in")

    query: str = Field(default="", alias="q")

    day: int = Field(default=0, alias="day_of_month")
    month: int = Field(default=0, alias="month_num")
    year: int = 0

    after_date: datetime | None = None

    @field_validator("post_type", "post_status", mode="before")
    @classmethod
    def _enum_to_value(cls, value: object) -> object:
        return value.value if isinstance(value, Enum) else value


class TermQueryOptions(_QueryOptions):
    """Filters for terms."""

    order_by: str = Field(default="", description="Ordering column, term_id ascending by default.")
    order_asc: bool = False

    id: int = Field(default=0, alias="term_id")
    id_in: list[int] = Field(default_factory=list, alias="term_id__in")
    id_not_in: list[int] = Field(default_factory=list, alias="term_id__not_in")

    name: str = Field(default="", alias="term_name")
    name_in: list[str] = Field(default_factory=list, alias="term_name__in")
    name_not_in: list[str] = Field(default_factory=list, alias="term_name__not_in")

    object_id: int = 0
    object_id_in: list[int] = Field(default_factory=list, alias="object_id__in")
    object_id_not_in: list[int] = Field(default_factory=list, alias="object_id__not_in")

    parent_id: int = 0
    parent_id_in: list[int] = Field(default_factory=list, alias="parent_id__in")
    parent_id_not_in: list[int] = Field(default_factory=list, alias="parent_id__not_in")

    slug: str = Field(default="", alias="term_slug")
    slug_in: list[str] = Field(default_factory=list, alias="term_slug__in")
    slug_not_in: list[str] = Field(default_factory=list, alias="term_slug__not_in")

    taxonomy: str = ""
    taxonomy_in: list[str] = Field(default_factory=list, alias="taxonomy__in")
    taxonomy_not_in: list[str] = Field(default_factory=list, alias="taxonomy__not_in")

    @field_validator("taxonomy", mode="before")
    @classmethod
    def _taxonomy_value(cls, value: object) -> object:
        return value.value if isinstance(value, Enum) else value

    @field_validator("taxonomy_in", "taxonomy_not_in", mode="before")
    @classmethod
    def _taxonomy_values(cls, value: object) -> object:
        if isinstance(value, (list, tuple)):
            return [item.value if isinstance(item, Enum) else item for item in value]
        return value


class UserQueryOptions(_QueryOptions):
    """Filters for users; results are ordered by id."""

    id: int = Field(default=0, alias="user_id")
    id_in: list[int] = Field(default_factory=list, alias="user_id__in")
    id_not_in: list[int] = Field(default_factory=list, alias="user_id__not_in")

    slug: str = ""
    slug_in: list[str] = Field(default_factory=list, alias="slug__in")
    slug_not_in: list[str] = Field(default_factory=list, alias="slug__not_in")


# -----------------------------------------------------------------------------
# Predicate helpers
# -----------------------------------------------------------------------------


def _exact_in_not_in(
    column: ColumnElement[Any],
    exact: Any,
    in_values: Sequence[Any],
    not_in_values: Sequence[Any],
) -> ColumnElement[bool] | None:
    if exact:
        return column == exact
    if in_values:
        return column.in_(list(in_values))
    if not_in_values:
        return column.not_in(list(not_in_values))
    return None


def term_membership(
    taxonomy: Taxonomy,
    *,
    term_ids: Sequence[int] | None = None,
    slugs: Sequence[str] | None = None,
    negate: bool = False,
) -> ColumnElement[bool]:
    """``ID [NOT] IN`` the objects related to the given terms of a taxonomy."""

    subquery = (
        select(TermRelationshipRow.object_id)
        .join(
            TermTaxonomyRow,
            TermRelationshipRow.term_taxonomy_id == TermTaxonomyRow.term_taxonomy_id,
        )
        .join(TermRow, TermTaxonomyRow.term_id == TermRow.term_id)
        .where(TermTaxonomyRow.taxonomy == taxonomy.value)
    )
    if term_ids is not None:
        subquery = subquery.where(TermRow.term_id.in_(list(term_ids)))
    if slugs is not None:
        subquery = subquery.where(TermRow.slug.in_(list(slugs)))
    return PostRow.id.not_in(subquery) if negate else PostRow.id.in_(subquery)


def meta_membership(entries: Sequence[str], *, negate: bool = False) -> ColumnElement[bool]:
    """``ID [NOT] IN`` the objects carrying any of the ``key`` / ``key=value`` entries."""

    conditions = []
    for entry in entries:
        key, separator, value = entry.partition("=")
        condition = PostMetaRow.meta_key == key
        if separator:
            condition = and_(condition, PostMetaRow.meta_value == value)
        conditions.append(condition)

    subquery = select(PostMetaRow.post_id).distinct().where(or_(*conditions))
    return PostRow.id.not_in(subquery) if negate else PostRow.id.in_(subquery)


def author_name_membership(names: Sequence[str], *, negate: bool = False) -> ColumnElement[bool]:
    subquery = select(UserRow.id).where(UserRow.user_nicename.in_(list(names)))
    if negate:
        return PostRow.post_author.not_in(subquery)
    return PostRow.post_author.in_(subquery)


def search_tokens(text: str) -> list[str]:
    """Split free text on runs of non-letters, keeping tokens of three or more letters."""

    return [token for token in _SEARCH_SEPARATOR.split(text) if len(token) >= _MIN_SEARCH_TOKEN_LENGTH]


def search_predicate(text: str) -> ColumnElement[bool] | None:
    """OR of LIKE matches of every token against slug, title and content."""

    conditions = []
    for token in search_tokens(text):
        pattern = f"%{token}%"
        conditions.extend(
            [
                PostRow.post_name.like(pattern),
                PostRow.post_title.like(pattern),
                PostRow.post_content.like(pattern),
            ]
        )
    if not conditions:
        return None
    return or_(*conditions)


def split_category_names(value: str) -> tuple[list[str], list[str], list[str]]:
    """Split a ``category_name`` string into its (and, in, not in) name lists."""

    names_and: list[str] = []
    names_in: list[str] = []
    names_not_in: list[str] = []
    for prefix, name in _CATEGORY_NAME_TOKEN.findall(value):
        name = name.strip()
        if not name:
            continue
        if prefix == "+":
            names_and.append(name)
        elif prefix == "~":
            names_not_in.append(name)
        else:
            names_in.append(name)
    return names_and, names_in, names_not_in


def _order_column(table_columns: Any, order_by: str, default: str) -> Column[Any]:
    name = sanitize_identifier(order_by) if order_by else default
    column = table_columns.get(name) if name else None
    if column is None:
        raise InvalidQueryError(f"unknown ordering column {order_by!r}", context={"order_by": order_by})
    return column


# -----------------------------------------------------------------------------
# Builders
# -----------------------------------------------------------------------------


class TermResolver(Protocol):
    """Term lookups the object query builder needs for category filters."""

    async def get_descendant_ids(self, root_id: int) -> list[int]: ...

    async def get_category_id_by_slug(self, slug: str) -> int: ...


class ObjectQueryBuilder:
    """Turns ``ObjectQueryOptions`` into one ``SELECT ID, <order column>`` statement."""

    def __init__(self, terms: TermResolver, *, default_limit: int = DEFAULT_LIMIT) -> None:
        self._terms = terms
        self._default_limit = default_limit

    def order_column(self, options: ObjectQueryOptions) -> Column[Any]:
        return _order_column(PostRow.__table__.c, options.order_by, DEFAULT_OBJECT_ORDER)

    async def build(self, options: ObjectQueryOptions) -> Select[Any]:
        order_column = self.order_column(options)
        stmt = select(PostRow.id, order_column.label("cursor_value"))

        if options.post_type:
            stmt = stmt.where(PostRow.post_type == options.post_type)
        if options.post_status:
            stmt = stmt.where(PostRow.post_status == options.post_status)

        for predicate in (
            _exact_in_not_in(
                PostRow.post_author, options.author, options.author_in, options.author_not_in
            ),
            self._author_name_predicate(options),
            _exact_in_not_in(PostRow.post_name, options.name, options.name_in, options.name_not_in),
            _exact_in_not_in(
                PostRow.post_parent, options.parent, options.parent_in, options.parent_not_in
            ),
            _exact_in_not_in(PostRow.id, options.post, options.post_in, options.post_not_in),
        ):
            if predicate is not None:
                stmt = stmt.where(predicate)

        for predicate in await self._category_predicates(options):
            stmt = stmt.where(predicate)
        for predicate in self._term_id_predicates(
            Taxonomy.NAV_MENU,
            options.menu_id,
            options.menu_id_and,
            options.menu_id_in,
            options.menu_id_not_in,
        ):
            stmt = stmt.where(predicate)
        for predicate in self._term_slug_predicates(
            Taxonomy.NAV_MENU,
            options.menu_name,
            options.menu_name_and,
            options.menu_name_in,
            options.menu_name_not_in,
        ):
            stmt = stmt.where(predicate)
        for predicate in self._term_id_predicates(
            Taxonomy.POST_TAG,
            options.tag_id,
            options.tag_id_and,
            options.tag_id_in,
            options.tag_id_not_in,
        ):
            stmt = stmt.where(predicate)
        for predicate in self._term_slug_predicates(
            Taxonomy.POST_TAG,
            options.tag_name,
            options.tag_name_and,
            options.tag_name_in,
            options.tag_name_not_in,
        ):
            stmt = stmt.where(predicate)
        for predicate in self._meta_predicates(options):
            stmt = stmt.where(predicate)

        if options.query:
            predicate = search_predicate(options.query)
            if predicate is not None:
                stmt = stmt.where(predicate)

        if options.day:
            stmt = stmt.where(extract("day", PostRow.post_date) == options.day)
        if options.month:
            stmt = stmt.where(extract("month", PostRow.post_date) == options.month)
        if options.year:
            stmt = stmt.where(extract("year", PostRow.post_date) == options.year)
        if options.after_date is not None:
            stmt = stmt.where(PostRow.post_date > options.after_date)

        return _paginate(
            stmt,
            order_column,
            after=options.after,
            ascending=options.order_asc,
            limit=options.limit,
            default_limit=self._default_limit,
        )

    @staticmethod
    def _author_name_predicate(options: ObjectQueryOptions) -> ColumnElement[bool] | None:
        if options.author_name:
            return author_name_membership([options.author_name])
        if options.author_name_in:
            return author_name_membership(options.author_name_in)
        if options.author_name_not_in:
            return author_name_membership(options.author_name_not_in, negate=True)
        return None

    async def _category_predicates(self, options: ObjectQueryOptions) -> list[ColumnElement[bool]]:
        names_and = list(options.category_name_and)
        names_in = list(options.category_name_in)
        names_not_in = list(options.category_name_not_in)
        if options.category_name:
            split_and, split_in, split_not_in = split_category_names(options.category_name)
            names_and += split_and
            names_in += split_in
            names_not_in += split_not_in

        category_and = list(options.category_and)
        category_in = list(options.category_in)
        category_not_in = list(options.category_not_in)

        # An "and" needs every name, an "in" needs at least one.
        unresolvable = False
        if names_and:
            resolved = await self._resolve_category_slugs(names_and)
            unresolvable = len(resolved) < len(names_and)
            category_and += resolved
        elif names_in:
            resolved = await self._resolve_category_slugs(names_in)
            unresolvable = not resolved
            category_in += resolved
        elif names_not_in:
            category_not_in += await self._resolve_category_slugs(names_not_in)

        if options.category:
            ids = await self._terms.get_descendant_ids(options.category)
            return [term_membership(Taxonomy.CATEGORY, term_ids=ids)]
        # Unresolved names only empty the result when no id form is populated.
        if unresolvable and not (
            options.category_and or options.category_in or options.category_not_in
        ):
            return [false()]
        if category_and:
            return [
                term_membership(
                    Taxonomy.CATEGORY, term_ids=await self._terms.get_descendant_ids(category_id)
                )
                for category_id in category_and
            ]
        if category_in:
            return [term_membership(Taxonomy.CATEGORY, term_ids=await self._closure(category_in))]
        if category_not_in:
            return [
                term_membership(
                    Taxonomy.CATEGORY, term_ids=await self._closure(category_not_in), negate=True
                )
            ]
        return []

    async def _closure(self, category_ids: Sequence[int]) -> list[int]:
        ids: dict[int, None] = {}
        for category_id in category_ids:
            ids.update(dict.fromkeys(await self._terms.get_descendant_ids(category_id)))
        return list(ids)

    async def _resolve_category_slugs(self, slugs: Sequence[str]) -> list[int]:
        resolved = []
        for slug in slugs:
            try:
                resolved.append(await self._terms.get_category_id_by_slug(slug))
            except SlugNotFoundError:
                LOGGER.debug("Category slug %r does not resolve", slug)
        return resolved

    @staticmethod
    def _term_id_predicates(
        taxonomy: Taxonomy,
        exact: int,
        and_ids: Sequence[int],
        in_ids: Sequence[int],
        not_in_ids: Sequence[int],
    ) -> list[ColumnElement[bool]]:
        if exact:
            return [term_membership(taxonomy, term_ids=[exact])]
        if and_ids:
            return [term_membership(taxonomy, term_ids=[term_id]) for term_id in and_ids]
        if in_ids:
            return [term_membership(taxonomy, term_ids=in_ids)]
        if not_in_ids:
            return [term_membership(taxonomy, term_ids=not_in_ids, negate=True)]
        return []

    @staticmethod
    def _term_slug_predicates(
        taxonomy: Taxonomy,
        exact: str,
        and_slugs: Sequence[str],
        in_slugs: Sequence[str],
        not_in_slugs: Sequence[str],
    ) -> list[ColumnElement[bool]]:
        if exact:
            return [term_membership(taxonomy, slugs=[exact])]
        if and_slugs:
            return [term_membership(taxonomy, slugs=[slug]) for slug in and_slugs]
        if in_slugs:
            return [term_membership(taxonomy, slugs=in_slugs)]
        if not_in_slugs:
            return [term_membership(taxonomy, slugs=not_in_slugs, negate=True)]
        return []

    @staticmethod
    def _meta_predicates(options: ObjectQueryOptions) -> list[ColumnElement[bool]]:
        if options.meta:
            return [meta_membership([options.meta])]
        if options.meta_and:
            return [meta_membership([entry]) for entry in options.meta_and]
        if options.meta_in:
            return [meta_membership(options.meta_in)]
        if options.meta_not_in:
            return [meta_membership(options.meta_not_in, negate=True)]
        return []


class TermQueryBuilder:
    """Turns ``TermQueryOptions`` into a ``SELECT term_id, <order column>`` statement."""

    def __init__(self, *, default_limit: int = DEFAULT_LIMIT) -> None:
        self._default_limit = default_limit

    def build(self, options: TermQueryOptions) -> Select[Any]:
        require_taxonomy = False
        require_relationships = False

        if options.order_by:
            name = sanitize_identifier(options.order_by)
            order_column = TermRow.__table__.c.get(name)
            if order_column is None:
                order_column = TermTaxonomyRow.__table__.c.get(name)
                require_taxonomy = order_column is not None
            if order_column is None:
                raise InvalidQueryError(
                    f"unknown ordering column {options.order_by!r}",
                    context={"order_by": options.order_by},
                )
            ascending = options.order_asc
        else:
            order_column = TermRow.__table__.c.term_id
            ascending = True

        conditions: list[ColumnElement[bool]] = []

        name = _exact_in_not_in(TermRow.name, options.name, options.name_in, options.name_not_in)
        if name is not None:
            conditions.append(name)

        related = _exact_in_not_in(
            TermRelationshipRow.object_id,
            options.object_id,
            options.object_id_in,
            options.object_id_not_in,
        )
        if related is not None:
            require_relationships = True
            conditions.append(related)

        parent = _exact_in_not_in(
            TermTaxonomyRow.parent,
            options.parent_id,
            options.parent_id_in,
            options.parent_id_not_in,
        )
        if parent is not None:
            require_taxonomy = True
            conditions.append(parent)

        slug = _exact_in_not_in(TermRow.slug, options.slug, options.slug_in, options.slug_not_in)
        if slug is not None:
            conditions.append(slug)

        taxonomy = _exact_in_not_in(
            TermTaxonomyRow.taxonomy,
            options.taxonomy,
            options.taxonomy_in,
            options.taxonomy_not_in,
        )
        if taxonomy is not None:
            require_taxonomy = True
            conditions.append(taxonomy)

        term_id = _exact_in_not_in(TermRow.term_id, options.id, options.id_in, options.id_not_in)
        if term_id is not None:
            conditions.append(term_id)

        stmt = select(TermRow.term_id, order_column.label("cursor_value")).select_from(TermRow)
        if require_taxonomy or require_relationships:
            stmt = stmt.join(TermTaxonomyRow, TermTaxonomyRow.term_id == TermRow.term_id)
        if require_relationships:
            stmt = stmt.join(
                TermRelationshipRow,
                TermRelationshipRow.term_taxonomy_id == TermTaxonomyRow.term_taxonomy_id,
            )
        if conditions:
            stmt = stmt.where(*conditions)

        return _paginate(
            stmt,
            order_column,
            after=options.after,
            ascending=ascending,
            limit=options.limit,
            default_limit=self._default_limit,
        )


class UserQueryBuilder:
    """Turns ``UserQueryOptions`` into a ``SELECT ID`` statement ordered by id."""

    def __init__(self, *, default_limit: int = DEFAULT_LIMIT) -> None:
        self._default_limit = default_limit

    def build(self, options: UserQueryOptions) -> Select[Any]:
        stmt = select(UserRow.id, UserRow.id.label("cursor_value"))

        for predicate in (
            _exact_in_not_in(UserRow.id, options.id, options.id_in, options.id_not_in),
            _exact_in_not_in(
                UserRow.user_nicename, options.slug, options.slug_in, options.slug_not_in
            ),
        ):
            if predicate is not None:
                stmt = stmt.where(predicate)

        return _paginate(
            stmt,
            UserRow.__table__.c.ID,
            after=options.after,
            ascending=True,
            limit=options.limit,
            default_limit=self._default_limit,
        )


def published_posts(options: ObjectQueryOptions) -> ObjectQueryOptions:
    """Restrict options to published rows, defaulting the type to ``post``."""

    return options.model_copy(
        update={
            "post_status": PostStatus.PUBLISH.value,
            "post_type": options.post_type or PostType.POST.value,
        }
    )


__all__ = [
    "DEFAULT_LIMIT",
    "ObjectQueryBuilder",
    "ObjectQueryOptions",
    "TermQueryBuilder",
    "TermQueryOptions",
    "TermResolver",
    "UserQueryBuilder",
    "UserQueryOptions",
    "decode_cursor",
    "encode_cursor",
    "meta_membership",
    "published_posts",
    "sanitize_identifier",
    "search_predicate",
    "search_tokens",
    "split_category_names",
    "term_membership",
    "to_sql",
]
