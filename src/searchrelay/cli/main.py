"""
Command-line interface for searchrelay.

Main Commands:
    serve: Run the HTTP search proxy
    search: Run a single search and record it in the history
    history: Show a page of the query history

Example Usage:
    Start the server:
        $ searchrelay serve --port 49069

    One-off search:
        $ searchrelay search "python asyncio" --format json

    Browse history:
        $ searchrelay history --page 2 --page-size 5 --format table

For more information, run: searchrelay --help
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from ..core.api import SearchService
from ..core.config import RelayConfig
from ..core.history import QueryHistoryStore
from ..core.types import OutputFormat, ResultItem
from ..utils.error_handling import ApiError, ConfigurationError
from ..utils.formatter import format_history, format_results
from ..utils.logging_config import (
    LogFormat,
    LogLevel,
    configure_logging,
    enable_debug_logging,
)


@click.group()
@click.option("--env-file", type=click.Path(dir_okay=False), default=None, help=".env 文件路径")
@click.option(
    "--log-level",
    type=click.Choice([level.value for level in LogLevel]),
    default=None,
    help="日志级别 (默认: SEARCHRELAY_LOG_LEVEL 或 INFO)",
)
@click.option(
    "--log-format",
    type=click.Choice([fmt.value for fmt in LogFormat]),
    default=None,
    help="日志格式",
)
@click.option("--debug", is_flag=True, default=False, help="启用调试日志")
@click.pass_context
def cli(
    ctx: click.Context,
    env_file: str | None,
    log_level: str | None,
    log_format: str | None,
    debug: bool,
) -> None:
    """searchrelay - 带查询历史的搜索代理服务"""
    try:
        cfg = RelayConfig.from_env(env_file)
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    if log_level:
        cfg.log_level = LogLevel(log_level)
    if log_format:
        cfg.log_format = LogFormat(log_format)

    configure_logging(
        level=cfg.log_level,
        format_type=cfg.log_format,
        log_file=cfg.log_file,
        enable_file=cfg.log_file is not None,
        enable_console=True,
    )
    if debug:
        enable_debug_logging()
        cfg.log_level = LogLevel.DEBUG

    ctx.obj = cfg


@cli.command("serve")
@click.option("--host", default=None, help="监听地址 (默认: SEARCHRELAY_HOST)")
@click.option("--port", type=click.IntRange(1, 65535), default=None, help="监听端口 (默认: PORT)")
@click.option("--reload", is_flag=True, default=False, help="代码变更时自动重启 (开发用)")
@click.pass_obj
def serve_cmd(cfg: RelayConfig, host: str | None, port: int | None, reload: bool) -> None:
    """启动 HTTP 搜索代理服务。"""
    import uvicorn

    if host:
        cfg.host = host
    if port:
        cfg.port = port

    try:
        cfg.validate()
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    click.echo(f"Starting API proxy server on http://{cfg.host}:{cfg.port}")
    if reload:
        # Reload needs an import string; the worker re-reads config from the environment
        uvicorn.run(
            "searchrelay.server.app:create_app",
            factory=True,
            host=cfg.host,
            port=cfg.port,
            reload=True,
        )
        return

    from ..server import create_app

    uvicorn.run(create_app(cfg), host=cfg.host, port=cfg.port, log_config=None)


async def _run_search(cfg: RelayConfig, query: str) -> list[ResultItem]:
    service = SearchService.from_config(cfg)
    try:
        return await service.search(query)
    finally:
        await service.aclose()


@cli.command("search")
@click.argument("query")
@click.option(
    "--format",
    "fmt",
    type=click.Choice([OutputFormat.TEXT.value, OutputFormat.JSON.value]),
    default=OutputFormat.TEXT.value,
    help="输出格式",
)
@click.pass_obj
def search_cmd(cfg: RelayConfig, query: str, fmt: str) -> None:
    """执行一次搜索并写入查询历史。"""
    if not query.strip():
        click.echo("Error: search query is required", err=True)
        sys.exit(2)

    try:
        results = asyncio.run(_run_search(cfg, query))
    except ApiError as e:
        click.echo(f"Error: {e.response_message}", err=True)
        sys.exit(1)

    click.echo(format_results(results, OutputFormat(fmt)))


@cli.command("history")
@click.option("--page", type=click.IntRange(min=1), default=1, help="页码 (从 1 开始)")
@click.option("--page-size", type=click.IntRange(min=1), default=None, help="每页条目数")
@click.option(
    "--format",
    "fmt",
    type=click.Choice([e.value for e in OutputFormat]),
    default=OutputFormat.TEXT.value,
    help="输出格式",
)
@click.option("--file", "history_file", type=click.Path(dir_okay=False), help="历史文件路径 (覆盖配置)")
@click.pass_obj
def history_cmd(
    cfg: RelayConfig, page: int, page_size: int | None, fmt: str, history_file: str | None
) -> None:
    """分页显示查询历史, 最新的在前。"""
    store = QueryHistoryStore(Path(history_file)) if history_file else QueryHistoryStore.from_config(cfg)
    history = store.get_history(page, page_size or cfg.default_page_size)

    output = format_history(history, OutputFormat(fmt))
    if output:
        click.echo(output)

    if store.last_read_errors.has_errors():
        skipped = store.last_read_errors.get_summary()["total_errors"]
        click.echo(f"Warning: skipped {skipped} malformed history line(s)", err=True)


def main() -> None:
    cli(prog_name="searchrelay")


if __name__ == "__main__":
    main()
