"""
Append-only query history store.

Every executed search is recorded as one JSON object per line in a flat file.
Reads re-scan the whole file, sort by recency and slice the requested page, so
the cost of a read grows with the size of the history; there is no index and
no compaction.

Classes:
    QueryHistoryStore: Append and paginated-read access to the history file

File Format:
    One UTF-8 JSON object per ``\\n``-terminated line::

        {"query": "python", "timestamp": "2024-05-01T10:00:00.000Z", "data": [{"title": "...", "url": "..."}]}

Example:
    Basic history usage:
        >>> from searchrelay.core.history import QueryHistoryStore
        >>> from searchrelay.core.types import ResultItem
        >>>
        >>> store = QueryHistoryStore("data/query-history.jsonl")
        >>> store.add_query("python", [ResultItem("Python", "https://python.org")])
        >>> page = store.get_history(page=1, page_size=10)
        >>> page.entries[0].query
        'python'
"""

from __future__ import annotations

import json
import os
import time
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path

from ...utils.error_handling import (
    ErrorCollector,
    HistoryParseError,
    PersistenceReadError,
    PersistenceWriteError,
)
from ...utils.logging_config import get_logger
from ..config import RelayConfig
from ..types import PaginatedHistory, QueryHistoryEntry, ResultItem, utc_timestamp
from .pagination import clamp, count_pages, paginate, sort_by_recency

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10


class QueryHistoryStore:
    """Durable, append-only record of past queries."""

    def __init__(
        self,
        history_file: str | Path,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.history_file = Path(history_file)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._directory_ready = False
        self.last_read_errors = ErrorCollector()

    @classmethod
    def from_config(cls, cfg: RelayConfig) -> QueryHistoryStore:
        return cls(cfg.resolve_history_file())

    def _ensure_directory(self) -> None:
        """Create the parent directory once; failures are logged, not raised."""
        if self._directory_ready:
            return
        directory = self.history_file.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            self._directory_ready = True
            get_logger().debug(f"Directory {directory} ready.", operation="history_mkdir")
        except OSError as e:
            get_logger().error(
                f"Error creating directory {directory}: {e}", operation="history_mkdir"
            )

    def add_query(self, query: str, results: Iterable[ResultItem]) -> None:
        """Append one entry and flush it to disk before returning.

        Raises:
            PersistenceWriteError: If the line could not be appended.
        """
        self._ensure_directory()

        entry = QueryHistoryEntry(
            query=query,
            timestamp=utc_timestamp(self._clock()),
            results=list(results),
        )
        line = json.dumps(entry.to_dict(), ensure_ascii=False) + "\n"
        try:
            line.encode("utf-8")
        except UnicodeEncodeError:
            # lone surrogates can only be stored as \u escapes
            line = json.dumps(entry.to_dict()) + "\n"

        try:
            with self.history_file.open("a", encoding="utf-8") as f:
                f.write(line)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            get_logger().error(
                f'Error appending query "{query}" to history file: {e}',
                operation="history_append",
                path=str(self.history_file),
            )
            raise PersistenceWriteError(
                query, self.history_file, context={"reason": str(e)}
            ) from e

        get_logger().log_query_recorded(query, len(entry.results))

    def _read_all_entries(self) -> list[QueryHistoryEntry]:
        """Parse every line of the history file.

        A missing file is an empty history. Lines that do not decode to a valid
        entry are skipped and recorded in ``last_read_errors``.

        Raises:
            PersistenceReadError: If the file exists but cannot be read.
        """
        self.last_read_errors = ErrorCollector()
        if not self.history_file.exists():
            return []

        start = time.perf_counter()
        entries: list[QueryHistoryEntry] = []
        try:
            # Binary mode so an undecodable line is skipped on its own
            with self.history_file.open("rb") as f:
                for line_number, raw in enumerate(f, start=1):
                    raw = raw.rstrip(b"\r\n")
                    if not raw.strip():
                        continue
                    try:
                        entries.append(QueryHistoryEntry.from_dict(json.loads(raw.decode("utf-8"))))
                    except (ValueError, TypeError, RecursionError) as e:
                        line = raw.decode("utf-8", errors="replace")
                        parse_error = HistoryParseError(
                            str(e), line, line_number, self.history_file
                        )
                        self.last_read_errors.add_error(parse_error)
                        get_logger().log_line_skipped(line_number, line, str(e))
        except OSError as e:
            raise PersistenceReadError(
                f"Error reading history entries: {e}", self.history_file
            ) from e

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        get_logger().log_history_read(
            len(entries), len(self.last_read_errors.errors), elapsed_ms
        )
        return entries

    def get_history(
        self, page: int = DEFAULT_PAGE, page_size: int = DEFAULT_PAGE_SIZE
    ) -> PaginatedHistory:
        """Return one page of history, most recent entry first.

        Never raises: read failures produce an empty page and are logged.
        """
        page = clamp(page)
        page_size = clamp(page_size)

        try:
            entries = sort_by_recency(self._read_all_entries())
            page_slice = paginate(entries, page, page_size)
        except Exception as e:
            get_logger().error(
                f"Error retrieving paginated history: {e}", operation="history_read"
            )
            return PaginatedHistory.empty(page, page_size)

        return PaginatedHistory(
            entries=page_slice.entries,
            total_count=len(entries),
            total_pages=page_slice.total_pages,
            current_page=page_slice.current_page,
            page_size=page_size,
        )

    def get_total_count(self) -> int:
        """Number of readable entries; 0 if the history cannot be read."""
        try:
            return len(self._read_all_entries())
        except Exception as e:
            get_logger().error(
                f"Error counting history entries: {e}", operation="history_read"
            )
            return 0

    def get_total_pages(self, page_size: int = DEFAULT_PAGE_SIZE) -> int:
        return count_pages(self.get_total_count(), clamp(page_size))
