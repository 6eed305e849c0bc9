"""
Search provider clients.

Each client turns a query string into a list of ResultItem objects.
"""

from .duckduckgo import DuckDuckGoClient, map_related_topics

__all__ = ["DuckDuckGoClient", "map_related_topics"]
