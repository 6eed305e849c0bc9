"""
Shared test fixtures and utilities for searchrelay tests.

This module provides common fixtures, test data, and helper functions
to reduce code duplication and improve test consistency across the test suite.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from searchrelay.core.api import SearchService
from searchrelay.core.history import QueryHistoryStore
from searchrelay.core.types import ResultItem
from searchrelay.utils.error_handling import ApiError
from searchrelay.utils.logging_config import LogLevel, configure_logging

# Test data constants
SAMPLE_RESULTS = [
    ResultItem(title="Python (programming language)", url="https://duckduckgo.com/Python"),
    ResultItem(title="Monty Python", url="https://duckduckgo.com/Monty_Python"),
]

SAMPLE_DUCKDUCKGO_RESPONSE = {
    "Abstract": "",
    "RelatedTopics": [
        {
            "FirstURL": "https://duckduckgo.com/Python_(programming_language)",
            "Text": "Python (programming language) A high-level language.",
        },
        {"FirstURL": "https://duckduckgo.com/Monty_Python", "Text": "Monty Python British comedy troupe."},
        {"FirstURL": "", "Text": "Missing link"},
        {"FirstURL": "https://duckduckgo.com/x", "Text": ""},
        {
            "Name": "Snakes",
            "Topics": [{"FirstURL": "https://duckduckgo.com/Pythonidae", "Text": "Pythonidae"}],
        },
    ],
}

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class TickingClock:
    """Returns a strictly increasing instant on every call."""

    def __init__(self, start: datetime = BASE_TIME, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


class FakeProvider:
    """In-memory stand-in for DuckDuckGoClient."""

    def __init__(self, results: list[ResultItem] | None = None, error: Exception | None = None):
        self.results = list(SAMPLE_RESULTS if results is None else results)
        self.error = error
        self.queries: list[str] = []
        self.closed = False

    async def get_search_results(self, query: str) -> list[ResultItem]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.results)

    async def aclose(self) -> None:
        self.closed = True


def entry_line(query: str, timestamp: str, results: list[dict] | None = None) -> str:
    """One serialized history line, newline included."""
    return json.dumps({"query": query, "timestamp": timestamp, "data": results or []}) + "\n"


@pytest.fixture(autouse=True)
def quiet_logging():
    """Route library logs through propagation only (caplog still sees them)."""
    configure_logging(level=LogLevel.INFO, enable_console=False)
    yield


@pytest.fixture
def history_file(tmp_path: Path) -> Path:
    return tmp_path / "data" / "query-history.jsonl"


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def store(history_file: Path, clock: TickingClock) -> QueryHistoryStore:
    return QueryHistoryStore(history_file, clock=clock)


@pytest.fixture
def populated_store(store: QueryHistoryStore) -> QueryHistoryStore:
    """Store holding "a", "b", "c" written in that order."""
    for query in ("a", "b", "c"):
        store.add_query(query, [])
    return store


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def failing_provider() -> FakeProvider:
    return FakeProvider(
        error=ApiError.internal(
            "Problem getting data from external service", "HTTP error [Status: 503]"
        )
    )


@pytest.fixture
def search_service(fake_provider: FakeProvider, store: QueryHistoryStore) -> SearchService:
    return SearchService(fake_provider, store)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "api: HTTP API tests")
    config.addinivalue_line("markers", "cli: CLI-related tests")
    config.addinivalue_line("markers", "history: History store tests")
