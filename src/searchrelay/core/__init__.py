"""
Core functionality for searchrelay.

- api: the search service composing provider and history
- config: configuration management
- history: append-only query history store and pagination
- providers: external search provider clients
- types: shared data types
"""

from .api import SearchService
from .config import RelayConfig
from .history import QueryHistoryStore

__all__ = [
    "QueryHistoryStore",
    "RelayConfig",
    "SearchService",
]
