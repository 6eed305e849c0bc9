"""
Command-line interface for searchrelay.

- serve: run the HTTP proxy
- search: one-off search recorded to history
- history: paginated history browsing
"""

from .main import cli, main

__all__ = [
    "cli",
    "main",
]
