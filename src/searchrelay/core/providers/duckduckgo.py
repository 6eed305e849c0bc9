from __future__ import annotations

from typing import Any

import httpx

from ...utils.error_handling import to_api_error
from ...utils.logging_config import get_logger
from ..config import RelayConfig
from ..types import ResultItem


def map_related_topics(payload: Any) -> list[ResultItem]:
    """
    Keep the top-level RelatedTopics that carry both a title and a link.

    Grouped topics (objects with a nested ``Topics`` list) have no ``Text``
    or ``FirstURL`` of their own and are dropped.
    """
    if not isinstance(payload, dict):
        return []
    topics = payload.get("RelatedTopics") or []
    if not isinstance(topics, list):
        return []

    items: list[ResultItem] = []
    for topic in topics:
        if not isinstance(topic, dict):
            continue
        text = topic.get("Text")
        url = topic.get("FirstURL")
        if isinstance(text, str) and text and isinstance(url, str) and url:
            items.append(ResultItem(title=text, url=url))
    return items


class DuckDuckGoClient:
    """Async client for the DuckDuckGo Instant Answer API."""

    def __init__(
        self,
        base_url: str = "http://api.duckduckgo.com/",
        timeout: float = 15.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(
        cls, cfg: RelayConfig, http_client: httpx.AsyncClient | None = None
    ) -> DuckDuckGoClient:
        return cls(cfg.provider_url, cfg.request_timeout, http_client)

    async def get_search_results(self, query: str) -> list[ResultItem]:
        """Fetch and map results for ``query``.

        Raises:
            ApiError: 500 when the provider is unreachable or answers with an error.
        """
        try:
            response = await self._client.get(
                self.base_url, params={"q": query, "format": "json"}
            )
            response.raise_for_status()
            # DuckDuckGo answers with application/x-javascript, so decode explicitly
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            api_error = to_api_error(e)
            get_logger().error(
                f"Internal Error: Problem getting data from external service: {api_error.log_message}",
                operation="provider_search",
            )
            raise api_error from e

        return map_related_topics(payload)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["DuckDuckGoClient", "map_related_topics"]
