"""
Unit tests for query option parsing and statement building.

Statements are compiled and inspected here; behavior against real rows is
covered by the repository tests.
"""

from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy.sql.elements import False_

from wpquery.db.query import (
    ObjectQueryBuilder,
    ObjectQueryOptions,
    TermQueryBuilder,
    TermQueryOptions,
    UserQueryBuilder,
    UserQueryOptions,
    decode_cursor,
    encode_cursor,
    published_posts,
    sanitize_identifier,
    search_tokens,
    split_category_names,
    to_sql,
)
from wpquery.enums import PostType, Taxonomy
from wpquery.exceptions import InvalidQueryError, SlugNotFoundError


class _Terms:
    """Term resolver double with a fixed hierarchy."""

    def __init__(self) -> None:
        self.descendants = {5: [5, 6]}
        self.slugs = {"news": 5, "tech": 6}

    async def get_descendant_ids(self, root_id: int) -> list[int]:
        return self.descendants.get(root_id, [root_id])

    async def get_category_id_by_slug(self, slug: str) -> int:
        if slug not in self.slugs:
            raise SlugNotFoundError(slug)
        return self.slugs[slug]


class TestCursor:
    def test_round_trip_of_datetime(self) -> None:
        value = datetime(2024, 3, 1, 12, 30)

        assert datetime.fromisoformat(decode_cursor(encode_cursor(value))) == value

    def test_cursor_is_url_safe(self) -> None:
        cursor = encode_cursor("??>>")

        assert "+" not in cursor and "/" not in cursor
        assert decode_cursor(cursor) == "??>>"

    def test_malformed_cursor_decodes_to_none(self) -> None:
        assert decode_cursor("not base64!!") is None
        assert decode_cursor("") is None
        assert decode_cursor(None) is None


class TestHelpers:
    def test_sanitize_identifier(self) -> None:
        assert sanitize_identifier("p.post_date; DROP TABLE") == "post_dateDROPTABLE"
        assert sanitize_identifier("post_title") == "post_title"

    def test_search_tokens_drop_short_words_and_digits(self) -> None:
        assert search_tokens("Go is 2 fast, really-fast!") == ["fast", "really", "fast"]

    def test_split_category_names(self) -> None:
        assert split_category_names("news,+tech~sports") == (["tech"], ["news"], ["sports"])
        assert split_category_names("") == ([], [], [])

    def test_enum_values_accepted(self) -> None:
        options = ObjectQueryOptions(post_type=PostType.PAGE)

        assert options.post_type == "page"

    def test_aliases_accepted(self) -> None:
        options = ObjectQueryOptions.model_validate(
            {"category_id__in": [1, 2], "q": "hello", "month_num": 3, "unknown": 1}
        )

        assert options.category_in == [1, 2]
        assert options.query == "hello"
        assert options.month == 3

    def test_published_posts_defaults_type(self) -> None:
        options = published_posts(ObjectQueryOptions(post_status="draft"))

        assert options.post_status == "publish"
        assert options.post_type == "post"
        assert published_posts(ObjectQueryOptions(post_type="page")).post_type == "page"


class TestObjectQueryBuilder:
    @pytest.mark.asyncio
    async def test_unknown_order_column_rejected(self) -> None:
        builder = ObjectQueryBuilder(_Terms())

        with pytest.raises(InvalidQueryError):
            await builder.build(ObjectQueryOptions(order_by="nope"))

    @pytest.mark.asyncio
    async def test_default_order_and_limit(self) -> None:
        sql, params = to_sql(await ObjectQueryBuilder(_Terms()).build(ObjectQueryOptions()))

        assert "ORDER BY wp_posts.post_date DESC" in sql
        assert 10 in params.values()

    @pytest.mark.asyncio
    async def test_negative_limit_is_unbounded(self) -> None:
        sql, _ = to_sql(await ObjectQueryBuilder(_Terms()).build(ObjectQueryOptions(limit=-1)))

        assert "LIMIT" not in sql

    @pytest.mark.asyncio
    async def test_category_expands_through_closure(self) -> None:
        stmt = await ObjectQueryBuilder(_Terms()).build(ObjectQueryOptions(category_in=[5]))
        _, params = to_sql(stmt)

        assert [5, 6] in params.values()
        assert Taxonomy.CATEGORY.value in params.values()

    @pytest.mark.asyncio
    async def test_exact_value_wins_over_lists(self) -> None:
        sql, params = to_sql(
            await ObjectQueryBuilder(_Terms()).build(
                ObjectQueryOptions(author=3, author_in=[4, 5])
            )
        )

        assert "wp_posts.post_author = " in sql
        assert [4, 5] not in params.values()

    @pytest.mark.asyncio
    async def test_unresolved_category_names_match_nothing(self) -> None:
        stmt = await ObjectQueryBuilder(_Terms()).build(ObjectQueryOptions(category_name="missing"))

        assert isinstance(stmt.whereclause, False_)

    @pytest.mark.asyncio
    async def test_malformed_cursor_is_ignored(self) -> None:
        builder = ObjectQueryBuilder(_Terms())

        with_cursor, _ = to_sql(await builder.build(ObjectQueryOptions(after="%%%")))
        without_cursor, _ = to_sql(await builder.build(ObjectQueryOptions()))

        assert with_cursor == without_cursor


class TestTermAndUserBuilders:
    def test_term_defaults_to_id_ascending_without_joins(self) -> None:
        sql, _ = to_sql(TermQueryBuilder().build(TermQueryOptions(slug="news")))

        assert "ORDER BY wp_terms.term_id ASC" in sql
        assert "JOIN" not in sql

    def test_term_taxonomy_axis_adds_join(self) -> None:
        sql, _ = to_sql(TermQueryBuilder().build(TermQueryOptions(taxonomy=Taxonomy.CATEGORY)))

        assert "JOIN wp_term_taxonomy" in sql
        assert "wp_term_relationships" not in sql

    def test_term_object_axis_adds_both_joins(self) -> None:
        sql, _ = to_sql(TermQueryBuilder().build(TermQueryOptions(object_id=9)))

        assert "JOIN wp_term_taxonomy" in sql
        assert "JOIN wp_term_relationships" in sql

    def test_user_cursor_is_lower_bound_on_id(self) -> None:
        sql, params = to_sql(
            UserQueryBuilder().build(UserQueryOptions(after=encode_cursor(4), limit=2))
        )

        assert 'wp_users."ID" >' in sql
        assert 4 in params.values()
