"""
Search service: the provider client and the history store composed.

Classes:
    SearchService: Runs searches, records them, and serves history pages

The store does blocking file I/O; the service runs every store call in a
worker thread so the event loop stays free while a request waits on disk.

Example:
    >>> from searchrelay.core.api import SearchService
    >>> from searchrelay.core.config import RelayConfig
    >>>
    >>> service = SearchService.from_config(RelayConfig())
    >>> results = await service.search("python")
    >>> page = await service.get_history(page=1, page_size=5)
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from ..utils.error_handling import PersistenceWriteError
from ..utils.logging_config import get_logger
from .config import RelayConfig
from .history import QueryHistoryStore
from .providers import DuckDuckGoClient
from .types import PaginatedHistory, ResultItem


class SearchProvider(Protocol):
    async def get_search_results(self, query: str) -> list[ResultItem]: ...

    async def aclose(self) -> None: ...


class SearchService:
    """Forwards queries to the provider and keeps an append-only history."""

    def __init__(self, provider: SearchProvider, history: QueryHistoryStore) -> None:
        self.provider = provider
        self.history = history

    @classmethod
    def from_config(cls, cfg: RelayConfig) -> SearchService:
        return cls(DuckDuckGoClient.from_config(cfg), QueryHistoryStore.from_config(cfg))

    async def search(self, query: str) -> list[ResultItem]:
        """Search and record the query.

        A failed history append is logged; the results are still returned.

        Raises:
            ApiError: If the provider call fails. Nothing is recorded then.
        """
        results = await self.provider.get_search_results(query)
        try:
            await asyncio.to_thread(self.history.add_query, query, results)
        except PersistenceWriteError as e:
            get_logger().warning(
                f"Search for \"{query}\" succeeded but was not recorded: {e.message}",
                operation="history_append",
            )
        return results

    async def get_history(self, page: int = 1, page_size: int = 10) -> PaginatedHistory:
        return await asyncio.to_thread(self.history.get_history, page, page_size)

    async def aclose(self) -> None:
        await self.provider.aclose()
