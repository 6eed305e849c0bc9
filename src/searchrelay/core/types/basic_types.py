"""
Basic type definitions for searchrelay.

Key Types:
    OutputFormat: Enumeration of supported CLI output formats
    ResultItem: One search hit returned by the provider
    QueryHistoryEntry: One persisted record of a query and its results
    PaginatedHistory: Read-time page of history entries

Example:
    Building and serializing an entry:
        >>> from searchrelay.core.types.basic_types import QueryHistoryEntry, ResultItem
        >>>
        >>> entry = QueryHistoryEntry(
        ...     query="python",
        ...     timestamp="2024-05-01T10:00:00.000Z",
        ...     results=[ResultItem(title="Python", url="https://python.org")],
        ... )
        >>> entry.to_dict()["data"][0]["url"]
        'https://python.org'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"
    TABLE = "table"


def utc_timestamp(now: datetime | None = None) -> str:
    """Render an instant as ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


@dataclass(slots=True)
class ResultItem:
    title: str
    url: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "url": self.url}

    @classmethod
    def from_dict(cls, data: Any) -> ResultItem:
        if not isinstance(data, dict):
            raise ValueError(f"result item must be an object, got {type(data).__name__}")
        title = data.get("title")
        url = data.get("url")
        if not isinstance(title, str) or not isinstance(url, str):
            raise ValueError("result item requires string 'title' and 'url'")
        return cls(title=title, url=url)


@dataclass(slots=True)
class QueryHistoryEntry:
    """One executed search. Results are persisted under the ``data`` key."""

    query: str
    timestamp: str
    results: list[ResultItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "timestamp": self.timestamp,
            "data": [item.to_dict() for item in self.results],
        }

    @classmethod
    def from_dict(cls, data: Any) -> QueryHistoryEntry:
        """Validate and build an entry from a decoded history line.

        Raises:
            ValueError: If the object does not have the persisted entry shape.
        """
        if not isinstance(data, dict):
            raise ValueError(f"entry must be an object, got {type(data).__name__}")
        query = data.get("query")
        timestamp = data.get("timestamp")
        results = data.get("data", [])
        if not isinstance(query, str):
            raise ValueError("entry requires a string 'query'")
        if not isinstance(timestamp, str):
            raise ValueError("entry requires a string 'timestamp'")
        parse_timestamp(timestamp)
        if not isinstance(results, list):
            raise ValueError("entry 'data' must be a list")
        return cls(
            query=query,
            timestamp=timestamp,
            results=[ResultItem.from_dict(item) for item in results],
        )

    @property
    def moment(self) -> datetime:
        return parse_timestamp(self.timestamp)


@dataclass(slots=True)
class PaginatedHistory:
    entries: list[QueryHistoryEntry] = field(default_factory=list)
    total_count: int = 0
    total_pages: int = 0
    current_page: int = 1
    page_size: int = 10

    def to_dict(self) -> dict[str, Any]:
        """Wire representation with camelCase keys."""
        return {
            "entries": [entry.to_dict() for entry in self.entries],
            "totalCount": self.total_count,
            "totalPages": self.total_pages,
            "currentPage": self.current_page,
            "pageSize": self.page_size,
        }

    @classmethod
    def empty(cls, page: int, page_size: int) -> PaginatedHistory:
        return cls(entries=[], total_count=0, total_pages=0, current_page=page, page_size=page_size)
