"""
Utility modules for searchrelay.

- Error handling and error reporting
- Logging configuration
- Output formatting for the CLI
"""

from .error_handling import (
    ApiError,
    ConfigurationError,
    ErrorCollector,
    HistoryParseError,
    PersistenceError,
    PersistenceReadError,
    PersistenceWriteError,
    RelayError,
    create_error_report,
    to_api_error,
)
from .logging_config import configure_logging, disable_logging, enable_debug_logging, get_logger

__all__ = [
    # Error handling
    "ApiError",
    "ConfigurationError",
    "ErrorCollector",
    "HistoryParseError",
    "PersistenceError",
    "PersistenceReadError",
    "PersistenceWriteError",
    "RelayError",
    "create_error_report",
    "to_api_error",
    # Logging
    "configure_logging",
    "disable_logging",
    "enable_debug_logging",
    "get_logger",
]
