"""
Type definitions for searchrelay.

Re-exports the data types shared by the history store, the search service,
the HTTP layer and the CLI.
"""

from .basic_types import (
    OutputFormat,
    PaginatedHistory,
    QueryHistoryEntry,
    ResultItem,
    parse_timestamp,
    utc_timestamp,
)

__all__ = [
    "OutputFormat",
    "PaginatedHistory",
    "QueryHistoryEntry",
    "ResultItem",
    "parse_timestamp",
    "utc_timestamp",
]
