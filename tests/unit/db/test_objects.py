"""
Unit tests for object access and the object query builder against real rows.
"""

from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import (
    PostMetaRowFactory,
    PostRowFactory,
    UserRowFactory,
    link,
    term_rows,
)
from wpquery.db.query import ObjectQueryOptions
from wpquery.enums import Taxonomy
from wpquery.exceptions import MissingResourcesError
from wpquery.reader import ContentReader

TITLES = {
    1: "Hello asyncio world",
    2: "Tech roundup",
    3: "Python packaging",
    4: "Guest column",
    5: "Unfinished draft",
}


@pytest.fixture
async def objects(db_session: AsyncSession) -> None:
    """Five posts on consecutive days with categories, a tag, meta and two authors."""
    rows: list[object] = [
        PostRowFactory.build(
            id=object_id,
            post_date=datetime(2024, 1, object_id, 10, 0),
            post_title=title,
            post_name=title.lower().replace(" ", "-"),
            post_content="Body text.",
            post_author=2 if object_id == 4 else 1,
            post_status="draft" if object_id == 5 else "publish",
            to_ping="https://a.example https://b.example" if object_id == 1 else "",
        )
        for object_id, title in TITLES.items()
    ]
    rows += [
        UserRowFactory.build(id=1, user_nicename="editor"),
        UserRowFactory.build(id=2, user_nicename="user-two"),
        *term_rows(1, "news"),
        *term_rows(2, "tech", parent=1),
        *term_rows(10, "python", taxonomy="post_tag"),
        *link(1, 1),
        *link(2, 2),
        *link(3, 10),
        PostMetaRowFactory.build(post_id=1, meta_key="color", meta_value="blue"),
        PostMetaRowFactory.build(post_id=2, meta_key="color", meta_value="red"),
        PostMetaRowFactory.build(post_id=1, meta_key="_edit_lock", meta_value="1"),
    ]
    db_session.add_all(rows)
    await db_session.commit()


async def _ids(reader: ContentReader, **options: object) -> list[int]:
    page = await reader.query_objects(ObjectQueryOptions(limit=-1, **options))
    return page.to_list()


class TestGetObjects:
    @pytest.mark.asyncio
    async def test_duplicates_keep_length_and_order(
        self, uncached_reader: ContentReader, objects: None
    ) -> None:
        result = await uncached_reader.get_objects([2, 1, 2])

        assert [item.id for item in result] == [2, 1, 2]
        assert result[1].title == TITLES[1]
        assert result[1].comment_status is True
        assert result[1].ping_status is False
        assert result[1].to_ping == ["https://a.example", "https://b.example"]

    @pytest.mark.asyncio
    async def test_missing_ids_raise(self, uncached_reader: ContentReader, objects: None) -> None:
        with pytest.raises(MissingResourcesError) as excinfo:
            await uncached_reader.get_objects([1, 404, 404])

        assert excinfo.value.ids == [404]
        assert str(excinfo.value) == "could not find ids 404"

    @pytest.mark.asyncio
    async def test_empty_input(self, uncached_reader: ContentReader) -> None:
        assert await uncached_reader.get_objects([]) == []

    @pytest.mark.asyncio
    async def test_meta(self, uncached_reader: ContentReader, objects: None) -> None:
        assert await uncached_reader.get_meta(1) == {"color": "blue", "_edit_lock": "1"}
        assert await uncached_reader.get_meta(1, "color") == {"color": "blue"}
        assert await uncached_reader.get_meta(3) == {}

    @pytest.mark.asyncio
    async def test_meta_for_many(self, uncached_reader: ContentReader, objects: None) -> None:
        meta = await uncached_reader.objects.get_meta_for([1, 2, 3], "color")

        assert meta == {1: {"color": "blue"}, 2: {"color": "red"}, 3: {}}

    @pytest.mark.asyncio
    async def test_taxonomy(self, uncached_reader: ContentReader, objects: None) -> None:
        categories = await uncached_reader.get_taxonomy(2, Taxonomy.CATEGORY)
        tags = await uncached_reader.get_taxonomy(3, Taxonomy.CATEGORY, Taxonomy.POST_TAG)
        nothing = await uncached_reader.get_taxonomy(3)

        assert categories.to_list() == [2]
        assert tags.to_list() == [10]
        assert nothing.to_list() == []


class TestQueryPagination:
    @pytest.mark.asyncio
    async def test_default_order_is_newest_first(
        self, uncached_reader: ContentReader, objects: None
    ) -> None:
        assert await _ids(uncached_reader) == [5, 4, 3, 2, 1]

    @pytest.mark.asyncio
    async def test_cursor_pages_have_no_gaps_or_overlap(
        self, uncached_reader: ContentReader, objects: None
    ) -> None:
        seen: list[int] = []
        cursor = None
        for _ in range(4):
            page = await uncached_reader.query_objects(ObjectQueryOptions(limit=2, after=cursor))
            ids = page.to_list()
            if not ids:
                break
            seen += ids
            cursor = page.cursor

        assert seen == [5, 4, 3, 2, 1]

    @pytest.mark.asyncio
    async def test_ascending_by_id(self, uncached_reader: ContentReader, objects: None) -> None:
        first = await uncached_reader.query_objects(
            ObjectQueryOptions(order_by="ID", order_asc=True, limit=3)
        )
        assert first.to_list() == [1, 2, 3]

        second = await uncached_reader.query_objects(
            ObjectQueryOptions(order_by="ID", order_asc=True, limit=3, after=first.cursor)
        )
        assert second.to_list() == [4, 5]

    @pytest.mark.asyncio
    async def test_default_limit(self, uncached_reader: ContentReader, objects: None) -> None:
        page = await uncached_reader.query_objects(ObjectQueryOptions(limit=0))

        assert len(page.to_list()) == 5

    @pytest.mark.asyncio
    async def test_malformed_cursor_starts_from_the_top(
        self, uncached_reader: ContentReader, objects: None
    ) -> None:
        assert await _ids(uncached_reader, after="***") == [5, 4, 3, 2, 1]

    @pytest.mark.asyncio
    async def test_rows_without_a_date_are_rejected(self, db_session: AsyncSession) -> None:
        db_session.add(PostRowFactory.build(id=1, post_date=None))

        with pytest.raises(IntegrityError):
            await db_session.commit()


class TestQueryFilters:
    @pytest.mark.asyncio
    async def test_category_in_expands_descendants(
        self, uncached_reader: ContentReader, objects: None
    ) -> None:
        assert await _ids(uncached_reader, category_in=[1]) == [2, 1]
        assert await _ids(uncached_reader, category=2) == [2]

    @pytest.mark.asyncio
    async def test_category_not_in(self, uncached_reader: ContentReader, objects: None) -> None:
        assert await _ids(uncached_reader, category_not_in=[1]) == [5, 4, 3]

    @pytest.mark.asyncio
    async def test_category_name_forms(
        self, uncached_reader: ContentReader, objects: None
    ) -> None:
        assert await _ids(uncached_reader, category_name="news") == [2, 1]
        assert await _ids(uncached_reader, category_name="~news") == [5, 4, 3]
        assert await _ids(uncached_reader, category_name="+news+news/tech") == [2]
        assert await _ids(uncached_reader, category_name="missing") == []
        assert await _ids(uncached_reader, category_name="~missing") == [5, 4, 3, 2, 1]

    @pytest.mark.asyncio
    async def test_unresolved_names_do_not_override_ids(
        self, uncached_reader: ContentReader, objects: None
    ) -> None:
        assert await _ids(uncached_reader, category_and=[1], category_name="missing") == [2, 1]
        assert await _ids(uncached_reader, category_in=[1], category_name="missing") == [2, 1]
        assert await _ids(uncached_reader, category_in=[1], category_name="+missing") == [2, 1]
        assert await _ids(uncached_reader, category_not_in=[1], category_name="missing") == [
            5,
            4,
            3,
        ]

    @pytest.mark.asyncio
    async def test_tags(self, uncached_reader: ContentReader, objects: None) -> None:
        assert await _ids(uncached_reader, tag_name="python") == [3]
        assert await _ids(uncached_reader, tag_id=10) == [3]
        assert await _ids(uncached_reader, tag_id_not_in=[10]) == [5, 4, 2, 1]

    @pytest.mark.asyncio
    async def test_meta(self, uncached_reader: ContentReader, objects: None) -> None:
        assert await _ids(uncached_reader, meta="color=blue") == [1]
        assert await _ids(uncached_reader, meta_in=["color"]) == [2, 1]
        assert await _ids(uncached_reader, meta_not_in=["color=red"]) == [5, 4, 3, 1]
        assert await _ids(uncached_reader, meta_and=["color", "_edit_lock"]) == [1]

    @pytest.mark.asyncio
    async def test_free_text(self, uncached_reader: ContentReader, objects: None) -> None:
        assert await _ids(uncached_reader, query="asyncio") == [1]
        assert await _ids(uncached_reader, query="packaging, roundup") == [3, 2]
        assert await _ids(uncached_reader, query="a b") == [5, 4, 3, 2, 1]

    @pytest.mark.asyncio
    async def test_date_parts(self, uncached_reader: ContentReader, objects: None) -> None:
        assert await _ids(uncached_reader, day=3) == [3]
        assert await _ids(uncached_reader, month=1, year=2024) == [5, 4, 3, 2, 1]
        assert await _ids(uncached_reader, year=2023) == []
        assert await _ids(uncached_reader, after_date=datetime(2024, 1, 3, 12)) == [5, 4]

    @pytest.mark.asyncio
    async def test_authors(self, uncached_reader: ContentReader, objects: None) -> None:
        assert await _ids(uncached_reader, author=2) == [4]
        assert await _ids(uncached_reader, author_not_in=[2]) == [5, 3, 2, 1]
        assert await _ids(uncached_reader, author_name="user-two") == [4]

    @pytest.mark.asyncio
    async def test_status_and_names(self, uncached_reader: ContentReader, objects: None) -> None:
        assert await _ids(uncached_reader, post_status="draft") == [5]
        assert await _ids(uncached_reader, name_in=["tech-roundup", "guest-column"]) == [4, 2]
        assert await _ids(uncached_reader, post_in=[1, 3]) == [3, 1]

    @pytest.mark.asyncio
    async def test_query_posts_only_published(
        self, uncached_reader: ContentReader, objects: None
    ) -> None:
        page = await uncached_reader.query_posts(ObjectQueryOptions(limit=-1, post_status="draft"))

        assert page.to_list() == [4, 3, 2, 1]
