"""
Query history persistence for searchrelay.

- history_core: the append-only, line-delimited history store
- pagination: pure recency ordering and page slicing
"""

from .history_core import QueryHistoryStore
from .pagination import PageSlice, paginate, sort_by_recency

__all__ = [
    "PageSlice",
    "QueryHistoryStore",
    "paginate",
    "sort_by_recency",
]
