"""
Configuration module for searchrelay.

This module defines the RelayConfig class, the central configuration object for
the HTTP service, the query-history store and the search provider client.

Classes:
    RelayConfig: Main configuration class with all service parameters

Key Configuration Areas:
    - Server: host, port, environment name
    - History: data directory, log file name, default page size
    - Provider: search API endpoint and request timeout
    - Logging: level, format, optional log file

Environment Variables:
    PORT, APP_ENV, SEARCHRELAY_HOST, SEARCHRELAY_DATA_DIR,
    SEARCHRELAY_HISTORY_FILE, SEARCHRELAY_PAGE_SIZE, SEARCHRELAY_PROVIDER_URL,
    SEARCHRELAY_TIMEOUT, SEARCHRELAY_LOG_LEVEL, SEARCHRELAY_LOG_FORMAT,
    SEARCHRELAY_LOG_FILE

Example:
    Loading from the environment:
        >>> from searchrelay.core.config import RelayConfig
        >>>
        >>> config = RelayConfig.from_env()
        >>> config.validate()
        >>> config.resolve_history_file()
        PosixPath('/srv/app/data/query-history.jsonl')
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from ..utils.error_handling import ConfigurationError
from ..utils.logging_config import LogFormat, LogLevel

DEFAULT_PORT = 49069
ENVIRONMENTS = ("development", "production", "test")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}", context={"field": name, "value": raw}
        ) from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be a number, got {raw!r}", context={"field": name, "value": raw}
        ) from None


def _env_enum(name: str, enum_cls: Any, default: Any) -> Any:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return enum_cls(raw.strip().upper() if enum_cls is LogLevel else raw.strip().lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(
            f"{name} must be one of: {choices}", context={"field": name, "value": raw}
        ) from None


@dataclass(slots=True)
class RelayConfig:
    # Server
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    env: str = "development"

    # History
    data_dir: Path = Path("data")  # relative paths resolve against the working directory
    history_filename: str = "query-history.jsonl"
    default_page_size: int = 10

    # Provider
    provider_url: str = "http://api.duckduckgo.com/"
    request_timeout: float = 15.0

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: LogFormat = LogFormat.COLOR
    log_file: Path | None = None

    def resolve_history_file(self) -> Path:
        base = Path(self.data_dir)
        if not base.is_absolute():
            base = Path.cwd() / base
        return base / self.history_filename

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> RelayConfig:
        """Build a config from environment variables, loading ``.env`` first.

        Values already present in the process environment win over the file.

        Raises:
            ConfigurationError: If a numeric or enumerated variable is malformed.
        """
        if env_file is not None:
            load_dotenv(env_file, override=False)
        else:
            load_dotenv(override=False)

        defaults = cls()
        log_file = os.getenv("SEARCHRELAY_LOG_FILE")
        return cls(
            host=os.getenv("SEARCHRELAY_HOST", defaults.host),
            port=_env_int("PORT", defaults.port),
            env=os.getenv("APP_ENV", defaults.env),
            data_dir=Path(os.getenv("SEARCHRELAY_DATA_DIR", str(defaults.data_dir))),
            history_filename=os.getenv("SEARCHRELAY_HISTORY_FILE", defaults.history_filename),
            default_page_size=_env_int("SEARCHRELAY_PAGE_SIZE", defaults.default_page_size),
            provider_url=os.getenv("SEARCHRELAY_PROVIDER_URL", defaults.provider_url),
            request_timeout=_env_float("SEARCHRELAY_TIMEOUT", defaults.request_timeout),
            log_level=_env_enum("SEARCHRELAY_LOG_LEVEL", LogLevel, defaults.log_level),
            log_format=_env_enum("SEARCHRELAY_LOG_FORMAT", LogFormat, defaults.log_format),
            log_file=Path(log_file) if log_file else None,
        )

    def validate(self) -> None:
        """Validate configuration and raise ConfigurationError on issues.

        Raises:
            ConfigurationError: If the configuration is invalid.
        """
        if not 1 <= self.port <= 65535:
            raise ConfigurationError(
                "Port must be between 1 and 65535",
                context={"field": "port", "value": self.port},
            )

        if self.env not in ENVIRONMENTS:
            raise ConfigurationError(
                f"Environment must be one of: {', '.join(ENVIRONMENTS)}",
                context={"field": "env", "value": self.env},
            )

        if not self.history_filename.strip():
            raise ConfigurationError(
                "History file name must not be empty",
                context={"field": "history_filename"},
            )

        if self.default_page_size < 1:
            raise ConfigurationError(
                "Default page size must be at least 1",
                context={"field": "default_page_size", "value": self.default_page_size},
            )

        if self.request_timeout <= 0:
            raise ConfigurationError(
                "Request timeout must be positive",
                context={"field": "request_timeout", "value": self.request_timeout},
            )

        if not self.provider_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                "Provider URL must be an http(s) URL",
                context={"field": "provider_url", "value": self.provider_url},
            )
