"""
HTTP server for searchrelay.

Run with ``searchrelay serve`` or ``uvicorn --factory searchrelay.server:create_app``.
"""

from .app import create_app

__all__ = ["create_app"]
