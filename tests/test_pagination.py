"""Tests for keyset pagination."""

from datetime import datetime
from types import SimpleNamespace

import pytest

from app.exceptions import StoreError, ValidationError
from app.models import Image
from app.services.image_service import list_images
from app.services.pagination import (
    CursorOp,
    cursor_op_for,
    decode_cursor,
    encode_cursor,
    next_cursor,
    sort_column,
)
from app.services.query_params import SortDirection, parse_image_query
from tests.helpers import add_images, make_image


class TestCursorOp:
    def test_direction_selects_operator(self):
        assert cursor_op_for(SortDirection.ASC) is CursorOp.GREATER_THAN
        assert cursor_op_for(SortDirection.DESC) is CursorOp.LESS_THAN


class TestCursorCoding:
    def test_integer_column(self):
        assert decode_cursor(Image.__table__.c.id, "42") == 42

    def test_timestamp_column(self):
        value = decode_cursor(Image.__table__.c.created_at, "2024-01-01T12:05:00")
        assert value == datetime(2024, 1, 1, 12, 5)

    def test_string_column_is_raw(self):
        assert decode_cursor(Image.__table__.c.uid, "uid-3") == "uid-3"

    def test_malformed_cursor(self):
        with pytest.raises(ValidationError):
            decode_cursor(Image.__table__.c.id, "not-a-number")
        with pytest.raises(ValidationError):
            decode_cursor(Image.__table__.c.created_at, "yesterday")

    def test_encode(self):
        assert encode_cursor(7) == "7"
        assert encode_cursor(datetime(2024, 1, 1, 12, 5)) == "2024-01-01T12:05:00"

    def test_unknown_sort_field(self):
        with pytest.raises(StoreError):
            sort_column("no_such_column")


class TestNextCursor:
    def test_full_page_emits_cursor(self):
        rows = [SimpleNamespace(id=1, width=10), SimpleNamespace(id=2, width=20)]
        assert next_cursor(rows, "width", 2) == "20"

    def test_short_page_ends_results(self):
        rows = [SimpleNamespace(id=1, width=10)]
        assert next_cursor(rows, "width", 2) is None
        assert next_cursor([], "width", 2) is None

    def test_null_sort_value_falls_back_to_id(self):
        rows = [SimpleNamespace(id=1, width=None), SimpleNamespace(id=9, width=None)]
        assert next_cursor(rows, "width", 2) == "9"


async def page(db, **query):
    result = await list_images(db, parse_image_query(query))
    return [image.id for image in result.images], result.next_cursor, result.total


class TestListImagesPaging:
    async def test_id_ascending_scenario(self, db, five_images):
        assert await page(db, sort="id.asc", limit="2") == ([1, 2], "2", 5)
        assert await page(db, sort="id.asc", limit="2", cursor="2") == ([3, 4], "4", 5)
        assert await page(db, sort="id.asc", limit="2", cursor="4") == ([5], None, 5)

    async def test_default_sort_is_newest_first(self, db, five_images):
        ids, cursor, _ = await page(db, limit="3")
        assert ids == [5, 4, 3]
        assert cursor == "2024-01-01T12:03:00"

        ids, cursor, _ = await page(db, limit="3", cursor=cursor)
        assert ids == [2, 1]
        assert cursor is None

    async def test_pages_never_repeat_items(self, db):
        await add_images(db, *[make_image(i) for i in range(1, 24)])
        seen = []
        cursor = None
        while True:
            query = {"sort": "created_at.asc", "limit": "5"}
            if cursor:
                query["cursor"] = cursor
            ids, cursor, _ = await page(db, **query)
            seen.extend(ids)
            if cursor is None:
                break
        assert seen == list(range(1, 24))

    async def test_exact_multiple_ends_with_empty_page(self, db):
        await add_images(db, *[make_image(i) for i in range(1, 5)])
        assert await page(db, sort="id.asc", limit="2", cursor="2") == ([3, 4], "4", 4)
        assert await page(db, sort="id.asc", limit="2", cursor="4") == ([], None, 4)

    async def test_page_never_exceeds_cap(self, db):
        await add_images(db, *[make_image(i) for i in range(1, 206)])
        ids, cursor, total = await page(db, sort="id.asc", limit="1000")
        assert len(ids) == 200
        assert cursor == "200"
        assert total == 205

    async def test_ascending_sort_puts_nulls_first(self, db):
        await add_images(db, make_image(1, width=300), make_image(2), make_image(3, width=100))
        ids, _, _ = await page(db, sort="width.asc")
        assert ids == [2, 3, 1]

    async def test_unknown_sort_field_is_store_error(self, db, five_images):
        with pytest.raises(StoreError):
            await page(db, sort="bogus.asc")

    async def test_total_ignores_cursor(self, db, five_images):
        _, _, total = await page(db, sort="id.asc", limit="2", cursor="3")
        assert total == 5

    async def test_page_ending_on_null_sort_value_skips_remaining_nulls(self, db):
        await add_images(
            db,
            make_image(1), make_image(2), make_image(3),
            make_image(4, width=5), make_image(5, width=50),
        )
        first, cursor, _ = await page(db, sort="width.asc", limit="2")
        assert set(first) <= {1, 2, 3}
        assert cursor in {"1", "2", "3"}

        second, cursor, _ = await page(db, sort="width.asc", limit="2", cursor=cursor)
        assert second == [4, 5]
        assert cursor == "50"
