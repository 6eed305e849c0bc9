"""
Pure pagination helpers for query history.

Nothing here touches the filesystem; the store hands in the parsed entries and
gets back the slice to serve.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import NamedTuple

from ..types import QueryHistoryEntry


class PageSlice(NamedTuple):
    entries: list[QueryHistoryEntry]
    total_pages: int
    current_page: int


def clamp(value: int) -> int:
    """Page numbers and sizes are never below 1."""
    return max(1, value)


def count_pages(total_count: int, page_size: int) -> int:
    return math.ceil(total_count / clamp(page_size))


def sort_by_recency(entries: Sequence[QueryHistoryEntry]) -> list[QueryHistoryEntry]:
    """Order entries by timestamp, most recent first.

    Equal timestamps keep reverse write order: an entry appended later is
    listed first.
    """
    indexed = sorted(
        enumerate(entries),
        key=lambda pair: (pair[1].moment, pair[0]),
        reverse=True,
    )
    return [entry for _, entry in indexed]


def paginate(
    sorted_entries: Sequence[QueryHistoryEntry], page: int, page_size: int
) -> PageSlice:
    """Slice one page out of already-sorted entries.

    A page past the end is clamped to the last page when there is one.
    """
    page = clamp(page)
    page_size = clamp(page_size)
    total_pages = count_pages(len(sorted_entries), page_size)

    if page > total_pages and total_pages > 0:
        page = total_pages

    skip = (page - 1) * page_size
    return PageSlice(
        entries=list(sorted_entries[skip : skip + page_size]),
        total_pages=total_pages,
        current_page=page,
    )
