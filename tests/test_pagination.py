"""
Tests for the one-extra-row pagination protocol.
"""

import asyncio

import pytest

from scribe.services.pagination import paginate


class RecordingFetcher:
    """Serves slices of a fixed list and records every call."""

    def __init__(self, rows):
        self.rows = rows
        self.calls = []

    async def __call__(self, offset, limit):
        self.calls.append((offset, limit))
        return self.rows[offset:offset + limit]


def run(coro):
    return asyncio.run(coro)


class TestPaginate:
    def test_more_rows_than_page(self):
        fetch = RecordingFetcher(list(range(10)))
        page = run(paginate(fetch, offset=0, page_size=3))
        assert page.items == [0, 1, 2]
        assert page.has_more is True

    def test_exactly_page_size_rows(self):
        page = run(paginate(RecordingFetcher([1, 2, 3]), offset=0, page_size=3))
        assert page.items == [1, 2, 3]
        assert page.has_more is False

    def test_fewer_rows_than_page(self):
        page = run(paginate(RecordingFetcher([1]), offset=0, page_size=3))
        assert page.items == [1]
        assert page.has_more is False

    def test_page_size_plus_one_rows(self):
        page = run(paginate(RecordingFetcher([1, 2, 3, 4]), offset=0, page_size=3))
        assert page.items == [1, 2, 3]
        assert page.has_more is True

    def test_offset_past_end(self):
        page = run(paginate(RecordingFetcher([1, 2]), offset=5, page_size=3))
        assert page.items == []
        assert page.has_more is False

    def test_last_page(self):
        page = run(paginate(RecordingFetcher(list(range(7))), offset=6, page_size=3))
        assert page.items == [6]
        assert page.has_more is False

    def test_single_query_for_one_extra_row(self):
        fetch = RecordingFetcher(list(range(10)))
        run(paginate(fetch, offset=4, page_size=3))
        assert fetch.calls == [(4, 4)]

    @pytest.mark.parametrize("page_size", [1, 2, 5, 9, 10, 11])
    def test_walking_all_pages_sees_every_row_once(self, page_size):
        rows = list(range(10))
        fetch = RecordingFetcher(rows)
        seen, offset, has_more = [], 0, True
        while has_more:
            page = run(paginate(fetch, offset=offset, page_size=page_size))
            assert len(page.items) <= page_size
            seen.extend(page.items)
            offset += len(page.items)
            has_more = page.has_more
        assert seen == rows

    @pytest.mark.parametrize("offset,page_size", [(-1, 3), (0, 0), (0, -2)])
    def test_invalid_arguments(self, offset, page_size):
        with pytest.raises(ValueError):
            run(paginate(RecordingFetcher([]), offset=offset, page_size=page_size))
