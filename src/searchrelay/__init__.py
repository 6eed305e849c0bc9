"""
searchrelay: HTTP search proxy with an append-only query history.

Queries are forwarded to the DuckDuckGo Instant Answer API; every successful
search is appended to a line-delimited JSON log that can be browsed page by
page, most recent first.

Main Classes:
    SearchService: Runs searches and records them
    QueryHistoryStore: Append-only history file with paginated reads
    RelayConfig: Service configuration (environment / .env aware)
    DuckDuckGoClient: Async provider client

Core Modules:
    core.api: Search service
    core.config: Configuration management and validation
    core.history: History store and pagination
    core.providers: Search provider clients
    core.types: Data types
    server: FastAPI application
    cli: Command-line interface

Example Usage:
    Programmatic history access:
        >>> from searchrelay import QueryHistoryStore, ResultItem
        >>> store = QueryHistoryStore("data/query-history.jsonl")
        >>> store.add_query("python", [ResultItem("Python", "https://python.org")])
        >>> store.get_history(page=1, page_size=10).total_count
        1

    CLI usage:
        $ searchrelay serve
        $ searchrelay history --page 1 --page-size 20
"""

from .core.api import SearchService
from .core.config import RelayConfig
from .core.history import QueryHistoryStore, paginate
from .core.providers import DuckDuckGoClient
from .core.types import OutputFormat, PaginatedHistory, QueryHistoryEntry, ResultItem
from .utils.error_handling import (
    ApiError,
    ConfigurationError,
    HistoryParseError,
    PersistenceError,
    PersistenceReadError,
    PersistenceWriteError,
    RelayError,
)
from .utils.logging_config import configure_logging, disable_logging, enable_debug_logging, get_logger

# Package metadata
__version__ = "0.1.0"
__license__ = "MIT"
__description__ = "HTTP search proxy with an append-only, paginated query history"

# Public API
__all__ = [
    # Main classes
    "SearchService",
    "QueryHistoryStore",
    "RelayConfig",
    "DuckDuckGoClient",
    "paginate",
    # Data types
    "OutputFormat",
    "PaginatedHistory",
    "QueryHistoryEntry",
    "ResultItem",
    # Logging and configuration
    "configure_logging",
    "get_logger",
    "enable_debug_logging",
    "disable_logging",
    # Exception classes
    "RelayError",
    "ApiError",
    "ConfigurationError",
    "PersistenceError",
    "PersistenceWriteError",
    "PersistenceReadError",
    "HistoryParseError",
    # Package metadata
    "__version__",
    "__license__",
    "__description__",
]
