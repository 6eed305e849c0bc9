from __future__ import annotations

import json
import logging
import logging.handlers
import sys
import time
from enum import Enum
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


class LogLevel(str, Enum):
    """Available log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Available log formats."""

    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"
    STRUCTURED = "structured"
    COLOR = "color"


# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
    }
)


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class RelayLogger:
    """
    Centralized logging for searchrelay with multiple output formats
    and configurable levels.
    """

    def __init__(
        self,
        name: str = "searchrelay",
        level: LogLevel = LogLevel.INFO,
        format_type: LogFormat = LogFormat.SIMPLE,
        log_file: Path | None = None,
        max_file_size: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
        enable_console: bool = True,
        enable_file: bool = False,
    ):
        self.name = name
        self.level = level
        self.format_type = format_type
        self.log_file = log_file
        self.max_file_size = max_file_size
        self.backup_count = backup_count
        self.enable_console = enable_console
        self.enable_file = enable_file

        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.value))

        # Clear existing handlers
        self.logger.handlers.clear()

        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Setup logging handlers based on configuration."""
        if self.enable_console:
            console_handler: logging.Handler
            if self.format_type == LogFormat.COLOR:
                console_handler = RichHandler(
                    console=Console(stderr=True),
                    show_path=False,
                    rich_tracebacks=True,
                    markup=False,
                )
            else:
                console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, self.level.value))
            console_handler.setFormatter(self._get_formatter())
            self.logger.addHandler(console_handler)

        if self.enable_file and self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                self.log_file,
                maxBytes=self.max_file_size,
                backupCount=self.backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(getattr(logging, self.level.value))
            # Colors never go to files
            if self.format_type == LogFormat.COLOR:
                file_handler.setFormatter(StructuredFormatter())
            else:
                file_handler.setFormatter(self._get_formatter())
            self.logger.addHandler(file_handler)

    def _get_formatter(self) -> logging.Formatter:
        """Get formatter based on format type."""
        if self.format_type == LogFormat.SIMPLE:
            return logging.Formatter("%(levelname)s: %(message)s")
        elif self.format_type == LogFormat.DETAILED:
            return logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
            )
        elif self.format_type == LogFormat.JSON:
            return JsonFormatter()
        elif self.format_type == LogFormat.STRUCTURED:
            return StructuredFormatter()
        elif self.format_type == LogFormat.COLOR:
            return ContextFormatter()
        else:
            return logging.Formatter("%(levelname)s: %(message)s")

    def debug(self, message: str, **kwargs: Any) -> None:
        self.logger.debug(message, extra=kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.logger.warning(message, extra=kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.logger.error(message, extra=kwargs)

    def log_query_recorded(self, query: str, results_count: int, **kwargs: Any) -> None:
        """Log a successful history append."""
        self.info(
            f'Query "{query}" added to history with {results_count} results.',
            operation="history_append",
            query=query,
            results_count=results_count,
            **kwargs,
        )

    def log_history_read(
        self, total_count: int, skipped: int, elapsed_ms: float, **kwargs: Any
    ) -> None:
        """Log a full history scan."""
        self.debug(
            f"History read: entries={total_count}, skipped={skipped}, time={elapsed_ms:.2f}ms",
            operation="history_read",
            total_count=total_count,
            skipped=skipped,
            elapsed_ms=elapsed_ms,
            **kwargs,
        )

    def log_line_skipped(self, line_number: int, line: str, error: str, **kwargs: Any) -> None:
        """Log a history line that failed to parse."""
        self.error(
            f"Error parsing history line {line_number}: {line} - {error}",
            operation="history_parse",
            line_number=line_number,
            error=error,
            **kwargs,
        )

    def log_request_complete(
        self, method: str, path: str, elapsed_ms: float, ok: bool = True, **kwargs: Any
    ) -> None:
        """Log an HTTP request outcome with its duration."""
        outcome = "OK" if ok else "FAILED"
        text = f"{outcome} took: {elapsed_ms:.0f}ms"
        fields = dict(
            operation="request_complete",
            method=method,
            path=path,
            elapsed_ms=elapsed_ms,
            **kwargs,
        )
        if ok:
            self.info(f"[{method} {path}] {text}", **fields)
        else:
            self.error(f"[{method} {path}] {text}", **fields)


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        log_entry.update(_extra_fields(record))

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class StructuredFormatter(logging.Formatter):
    """Structured formatter for human-readable structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        record.asctime = self.formatTime(record, self.datefmt)

        base = f"{record.asctime} [{record.levelname}] {record.name}: {record.getMessage()}"

        extra_fields = [f"{key}={value}" for key, value in _extra_fields(record).items()]
        if extra_fields:
            base += f" | {' '.join(extra_fields)}"

        if record.exc_info:
            base += f"\n{self.formatException(record.exc_info)}"

        return base


class ContextFormatter(logging.Formatter):
    """Message body for RichHandler: ``[PID n] [operation] message``."""

    def format(self, record: logging.LogRecord) -> str:
        prefix = f"[PID {record.process}]"
        operation = getattr(record, "operation", None)
        if operation:
            prefix += f" [{operation}]"
        return f"{prefix} {record.getMessage()}"


# Global logger instance
_global_logger: RelayLogger | None = None


def get_logger() -> RelayLogger:
    """Get the global logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = RelayLogger()
    return _global_logger


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    format_type: LogFormat = LogFormat.SIMPLE,
    log_file: Path | None = None,
    enable_console: bool = True,
    enable_file: bool = False,
    **kwargs: Any,
) -> RelayLogger:
    """Configure global logging settings."""
    global _global_logger
    _global_logger = RelayLogger(
        level=level,
        format_type=format_type,
        log_file=log_file,
        enable_console=enable_console,
        enable_file=enable_file,
        **kwargs,
    )
    return _global_logger


def disable_logging() -> None:
    """Disable all logging."""
    global _global_logger
    if _global_logger:
        _global_logger.logger.setLevel(logging.CRITICAL + 1)


def enable_debug_logging() -> None:
    """Enable debug logging for troubleshooting."""
    global _global_logger
    if _global_logger:
        _global_logger.level = LogLevel.DEBUG
        _global_logger.logger.setLevel(logging.DEBUG)
        for handler in _global_logger.logger.handlers:
            handler.setLevel(logging.DEBUG)
