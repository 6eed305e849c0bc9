"""
Output formatting for searchrelay.

Renders search results and history pages for the CLI as plain text, JSON, or
a rich console table.

Key Functions:
    format_history: Main entry point for formatting a PaginatedHistory
    format_results: Formatting for a list of ResultItem
    history_to_json_bytes / results_to_json_bytes: Fast JSON serialization using orjson
    render_history_table: Rich console table output

Example:
    >>> from searchrelay.utils.formatter import format_history
    >>> from searchrelay.core.types import OutputFormat
    >>>
    >>> print(format_history(page, OutputFormat.TEXT))
"""

from __future__ import annotations

from collections.abc import Sequence

import orjson
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..core.types import OutputFormat, PaginatedHistory, ResultItem, parse_timestamp


def _display_time(timestamp: str) -> str:
    try:
        return parse_timestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return timestamp


def history_to_json_bytes(history: PaginatedHistory) -> bytes:
    """Serialize a history page with the same camelCase keys the HTTP API uses."""
    return orjson.dumps(history.to_dict(), option=orjson.OPT_INDENT_2)


def results_to_json_bytes(results: Sequence[ResultItem]) -> bytes:
    return orjson.dumps([item.to_dict() for item in results], option=orjson.OPT_INDENT_2)


def format_history_text(history: PaginatedHistory) -> str:
    """
    Format a history page as plain text, one block per entry.

    Example:
        2024-05-01 10:00:00  python  (2 results)
            - Python (programming language) <https://duckduckgo.com/Python>
        # page 1/3 entries=25 page_size=10
    """
    out: list[str] = []
    for entry in history.entries:
        out.append(f"{_display_time(entry.timestamp)}  {entry.query}  ({len(entry.results)} results)")
        for item in entry.results:
            out.append(f"    - {item.title} <{item.url}>")
    if not history.entries:
        out.append("No search history found.")
    out.append(
        f"# page {history.current_page}/{history.total_pages} "
        f"entries={history.total_count} page_size={history.page_size}"
    )
    return "\n".join(out)


def render_history_table(history: PaginatedHistory, console: Console | None = None) -> None:
    """Render a history page as a rich table."""
    if console is None:
        console = Console()
    table = Table(
        title=f"Query history (page {history.current_page}/{history.total_pages})",
        show_lines=False,
    )
    table.add_column("When", style="dim", no_wrap=True)
    table.add_column("Query", style="bold")
    table.add_column("Results", justify="right")
    table.add_column("Top result")
    for entry in history.entries:
        top = entry.results[0].url if entry.results else ""
        # queries and URLs are user data, never markup
        table.add_row(
            _display_time(entry.timestamp),
            Text(entry.query),
            str(len(entry.results)),
            Text(top),
        )
    console.print(table)
    console.print(f"[dim]entries={history.total_count} page_size={history.page_size}[/dim]")


def format_history(history: PaginatedHistory, fmt: OutputFormat) -> str:
    """Format a history page according to the specified output format."""
    if fmt == OutputFormat.JSON:
        return history_to_json_bytes(history).decode("utf-8")
    if fmt == OutputFormat.TABLE:
        render_history_table(history)
        return ""
    return format_history_text(history)


def format_results(results: Sequence[ResultItem], fmt: OutputFormat) -> str:
    """Format provider results; TABLE falls back to text."""
    if fmt == OutputFormat.JSON:
        return results_to_json_bytes(results).decode("utf-8")
    if not results:
        return "No results."
    return "\n".join(f"{i}. {item.title}\n   {item.url}" for i, item in enumerate(results, start=1))
