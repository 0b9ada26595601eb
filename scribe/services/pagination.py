"""
Offset pagination without a count query.

Ask the store for one row more than the page holds; if it comes back,
there is at least one more page.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Sequence, TypeVar

from scribe.core.models import Page

T = TypeVar("T")

# fetch(offset, limit) -> rows in listing order
RangeFetcher = Callable[[int, int], Awaitable[Sequence[T]]]


async def paginate(fetch: RangeFetcher[T], offset: int, page_size: int) -> Page[T]:
    """
    Fetch one page.

    Args:
        fetch: Ordered range query against the store
        offset: Rows to skip, >= 0
        page_size: Rows per page, > 0

    Returns:
        Page with at most page_size items; has_more is True when the
        store returned an extra row
    """
    if offset < 0:
        raise ValueError("offset must be >= 0")
    if page_size < 1:
        raise ValueError("page_size must be > 0")

    rows = list(await fetch(offset, page_size + 1))
    if len(rows) > page_size:
        return Page(items=rows[:page_size], has_more=True)
    return Page(items=rows, has_more=False)
