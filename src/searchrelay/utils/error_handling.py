"""
Error handling and reporting for searchrelay.

This module defines the exception hierarchy used across the relay and the
helpers that turn low-level failures into errors the HTTP layer can render.

Error Categories:
    - PERSISTENCE: Query-history file append/read failures
    - PARSING: Malformed history lines
    - CONFIGURATION: Invalid settings or environment
    - NETWORK: Search provider connectivity and HTTP failures
    - VALIDATION: Malformed request input

Classes:
    ErrorSeverity: Error severity levels (LOW, MEDIUM, HIGH, CRITICAL)
    ErrorCategory: Error classification categories
    ErrorInfo: Detailed error information container
    ErrorCollector: Batch error collection (used for per-line read failures)
    RelayError: Base exception class for searchrelay errors
    ApiError: Error carrying an HTTP status and a client-facing message

Example:
    Converting a provider failure:
        >>> from searchrelay.utils.error_handling import ApiError, to_api_error
        >>> try:
        ...     response.raise_for_status()
        ... except Exception as e:
        ...     raise to_api_error(e) from e
"""

from __future__ import annotations

import sys
import time
import traceback
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import httpx


class ErrorSeverity(str, Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Error categories for classification."""

    PERSISTENCE = "persistence"
    PARSING = "parsing"
    CONFIGURATION = "configuration"
    NETWORK = "network"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


@dataclass
class ErrorInfo:
    """Detailed error information."""

    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    file_path: Path | None = None
    line_number: int | None = None
    exception_type: str | None = None
    traceback_str: str | None = None
    timestamp: float = field(default_factory=time.time)
    context: dict[str, Any] = field(default_factory=dict)
    suggestions: list[str] = field(default_factory=list)


class RelayError(Exception):
    """Base exception for searchrelay errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        file_path: Path | None = None,
        suggestions: list[str] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.category: ErrorCategory = category
        self.severity: ErrorSeverity = severity
        self.file_path: Path | None = file_path
        self.suggestions: list[str] = suggestions or []
        self.context: dict[str, Any] = context or {}
        self.timestamp: float = time.time()


class PersistenceError(RelayError):
    """Query-history file could not be written or read."""

    def __init__(
        self,
        message: str,
        file_path: Path | None = None,
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        suggestions: list[str] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            category=ErrorCategory.PERSISTENCE,
            severity=severity,
            file_path=file_path,
            suggestions=suggestions,
            context=context,
        )


class PersistenceWriteError(PersistenceError):
    """Appending an entry to the history file failed."""

    def __init__(
        self, query: str, file_path: Path | None = None, context: dict[str, Any] | None = None
    ) -> None:
        super().__init__(
            f"Failed to add query to history: {query}",
            file_path=file_path,
            suggestions=[
                "Check free disk space",
                "Check write permissions on the data directory",
            ],
            context=context,
        )
        self.query: str = query


class PersistenceReadError(PersistenceError):
    """The history file exists but could not be read."""

    def __init__(
        self, message: str, file_path: Path | None = None, context: dict[str, Any] | None = None
    ) -> None:
        super().__init__(
            message,
            file_path=file_path,
            severity=ErrorSeverity.MEDIUM,
            suggestions=["Check read permissions on the history file"],
            context=context,
        )


class HistoryParseError(RelayError):
    """A single history line is not a valid entry."""

    def __init__(
        self,
        message: str,
        line: str,
        line_number: int | None = None,
        file_path: Path | None = None,
    ) -> None:
        super().__init__(
            message,
            category=ErrorCategory.PARSING,
            severity=ErrorSeverity.LOW,
            file_path=file_path,
            suggestions=["The line is skipped; inspect the history file for manual edits"],
            context={"line": line},
        )
        self.line: str = line
        self.line_number: int | None = line_number


class ConfigurationError(RelayError):
    """Configuration-related errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            suggestions=[
                "Check the .env file and environment variables",
                "Verify all required settings",
            ],
            context=context,
        )


class ApiError(RelayError):
    """
    Error surfaced to HTTP clients.

    ``response_message`` is what the client sees; ``log_message`` carries the
    internal detail and is only ever logged.
    """

    def __init__(
        self,
        status_code: int,
        response_message: str,
        log_message: str,
        error: BaseException | None = None,
    ) -> None:
        category = ErrorCategory.VALIDATION if status_code < 500 else ErrorCategory.NETWORK
        severity = ErrorSeverity.LOW if status_code < 500 else ErrorSeverity.HIGH
        super().__init__(response_message, category=category, severity=severity)
        self.status_code: int = status_code
        self.response_message: str = response_message
        self.log_message: str = log_message
        self.error: BaseException | None = error

    @classmethod
    def bad_request(
        cls, response_message: str, log_message: str, error: BaseException | None = None
    ) -> ApiError:
        return cls(400, response_message, log_message, error)

    @classmethod
    def not_found(
        cls, response_message: str, log_message: str, error: BaseException | None = None
    ) -> ApiError:
        return cls(404, response_message, log_message, error)

    @classmethod
    def internal(
        cls, response_message: str, log_message: str, error: BaseException | None = None
    ) -> ApiError:
        return cls(500, response_message, log_message, error)


def _provider_message(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return None


def to_api_error(exception: BaseException) -> ApiError:
    """
    Convert any exception raised while talking to the provider into an ApiError.

    ApiError instances pass through untouched. httpx failures become a 500 with
    a log message carrying the upstream status and error class.
    """
    if isinstance(exception, ApiError):
        return exception

    if isinstance(exception, httpx.HTTPStatusError):
        message = _provider_message(exception.response) or str(exception)
        log_message = (
            f"HTTP error [Status: {exception.response.status_code}]"
            f" [Code: {type(exception).__name__}]: {message}"
        )
        return ApiError.internal(
            "Problem getting data from external service", log_message, exception
        )

    if isinstance(exception, httpx.RequestError):
        log_message = f"HTTP error [Code: {type(exception).__name__}]: {exception}"
        return ApiError.internal(
            "Problem getting data from external service", log_message, exception
        )

    return ApiError.internal("An unknown error occurred", str(exception) or "unknown error", exception)


class ErrorCollector:
    """Collects errors during a single operation."""

    def __init__(self, max_errors: int = 100) -> None:
        self.max_errors = max_errors
        self.errors: list[ErrorInfo] = []
        self.error_counts: dict[ErrorCategory, int] = {}

    def add_error(
        self,
        exception: Exception,
        category: ErrorCategory | None = None,
        severity: ErrorSeverity | None = None,
        file_path: Path | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Add an error to the collection."""
        if isinstance(exception, RelayError):
            error_category = exception.category
            error_severity = exception.severity
            error_file_path = exception.file_path or file_path
            error_suggestions = exception.suggestions
            error_context = {**exception.context, **(context or {})}
        else:
            error_category = category or self._classify_exception(exception)
            error_severity = severity or ErrorSeverity.MEDIUM
            error_file_path = file_path
            error_suggestions = []
            error_context = context or {}

        error_info = ErrorInfo(
            category=error_category,
            severity=error_severity,
            message=str(exception),
            file_path=error_file_path,
            line_number=getattr(exception, "line_number", None),
            exception_type=type(exception).__name__,
            traceback_str=traceback.format_exc() if sys.exc_info()[0] else None,
            context=error_context,
            suggestions=error_suggestions,
        )

        if len(self.errors) < self.max_errors:
            self.errors.append(error_info)

        self.error_counts[error_category] = self.error_counts.get(error_category, 0) + 1

    def _classify_exception(self, exception: Exception) -> ErrorCategory:
        """Classify exception into error category."""
        if isinstance(exception, (ValueError, TypeError, KeyError)):
            return ErrorCategory.PARSING
        if isinstance(exception, OSError):
            return ErrorCategory.PERSISTENCE
        if isinstance(exception, httpx.HTTPError):
            return ErrorCategory.NETWORK
        return ErrorCategory.UNKNOWN

    def get_errors_by_category(self, category: ErrorCategory) -> list[ErrorInfo]:
        return [error for error in self.errors if error.category == category]

    def get_errors_by_severity(self, severity: ErrorSeverity) -> list[ErrorInfo]:
        return [error for error in self.errors if error.severity == severity]

    def has_errors(self) -> bool:
        return bool(self.error_counts)

    def get_summary(self) -> dict[str, Any]:
        """Get error summary statistics."""
        return {
            "total_errors": sum(self.error_counts.values()),
            "by_category": {k.value: v for k, v in self.error_counts.items()},
            "by_severity": {
                severity.value: len(self.get_errors_by_severity(severity))
                for severity in ErrorSeverity
            },
        }

    def clear(self) -> None:
        """Clear all collected errors."""
        self.errors.clear()
        self.error_counts.clear()


def create_error_report(error_collector: ErrorCollector) -> str:
    """Create a human-readable error report."""
    if not error_collector.errors:
        return "No errors occurred while reading the history."

    summary = error_collector.get_summary()

    report = ["History Read Error Report", "=" * 50, ""]
    report.append(f"Total errors: {summary['total_errors']}")
    report.append("")

    report.append("Errors by category:")
    for category, count in summary["by_category"].items():
        report.append(f"  {category}: {count}")
    report.append("")

    report.append("Details:")
    for error in error_collector.errors:
        location = f"line {error.line_number}" if error.line_number else "file"
        report.append(f"  - [{location}] {error.message}")

    return "\n".join(report)
