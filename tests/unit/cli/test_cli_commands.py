"""
Tests for searchrelay.cli.main module.

Tests are organized by CLI command, matching the structure of main.py:
- TestCliGroup: cli group, help, configuration errors
- TestSearchCmd: search command
- TestHistoryCmd: history command
- TestServeCmd: serve command
- TestMainFunction: main() entry point
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from conftest import FakeProvider, entry_line
from searchrelay.cli import cli, main
from searchrelay.core.api import SearchService
from searchrelay.core.history import QueryHistoryStore
from searchrelay.utils.error_handling import ApiError
from searchrelay.utils.logging_config import LogLevel, get_logger

# Keep log lines off the captured output on success paths
QUIET = ["--log-level", "ERROR", "--log-format", "simple"]


@pytest.fixture
def data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    for name in ("PORT", "APP_ENV", "SEARCHRELAY_HISTORY_FILE", "SEARCHRELAY_PAGE_SIZE"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SEARCHRELAY_DATA_DIR", str(tmp_path / "data"))
    return tmp_path / "data"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _use_provider(monkeypatch: pytest.MonkeyPatch, provider: FakeProvider) -> None:
    monkeypatch.setattr(
        SearchService,
        "from_config",
        lambda cfg: SearchService(provider, QueryHistoryStore.from_config(cfg)),
    )


def _write_history(data_dir: Path, *lines: str) -> Path:
    data_dir.mkdir(parents=True, exist_ok=True)
    path = data_dir / "query-history.jsonl"
    path.write_text("".join(lines), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# cli group
# ---------------------------------------------------------------------------


class TestCliGroup:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "searchrelay" in result.output
        for command in ("serve", "search", "history"):
            assert command in result.output

    def test_malformed_environment(self, runner, data_dir, monkeypatch):
        monkeypatch.setenv("PORT", "not-a-port")
        result = runner.invoke(cli, [*QUIET, "history"])
        assert result.exit_code == 1
        assert "Configuration error: PORT must be an integer" in result.output

    def test_debug_flag_enables_debug_logging(self, runner, data_dir):
        result = runner.invoke(cli, ["--log-format", "simple", "--debug", "history"])
        assert result.exit_code == 0
        assert get_logger().level == LogLevel.DEBUG
        assert get_logger().logger.level == logging.DEBUG


# ---------------------------------------------------------------------------
# search command
# ---------------------------------------------------------------------------


class TestSearchCmd:
    def test_text_output_and_recorded(self, runner, data_dir, monkeypatch):
        provider = FakeProvider()
        _use_provider(monkeypatch, provider)

        result = runner.invoke(cli, [*QUIET, "search", "python"])

        assert result.exit_code == 0
        assert "1. Python (programming language)" in result.output
        assert "https://duckduckgo.com/Monty_Python" in result.output
        assert provider.queries == ["python"]
        assert provider.closed
        recorded = (data_dir / "query-history.jsonl").read_text(encoding="utf-8").splitlines()
        assert json.loads(recorded[0])["query"] == "python"

    def test_json_output(self, runner, data_dir, monkeypatch):
        _use_provider(monkeypatch, FakeProvider())
        result = runner.invoke(cli, [*QUIET, "search", "python", "--format", "json"])
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload[0]["url"] == "https://duckduckgo.com/Python"

    def test_no_results(self, runner, data_dir, monkeypatch):
        _use_provider(monkeypatch, FakeProvider(results=[]))
        result = runner.invoke(cli, [*QUIET, "search", "zzzz"])
        assert result.exit_code == 0
        assert "No results." in result.output

    def test_blank_query(self, runner, data_dir, monkeypatch):
        provider = FakeProvider()
        _use_provider(monkeypatch, provider)
        result = runner.invoke(cli, [*QUIET, "search", "  "])
        assert result.exit_code == 2
        assert provider.queries == []

    def test_provider_failure(self, runner, data_dir, monkeypatch):
        provider = FakeProvider(
            error=ApiError.internal("Problem getting data from external service", "boom")
        )
        _use_provider(monkeypatch, provider)

        result = runner.invoke(cli, [*QUIET, "search", "python"])

        assert result.exit_code == 1
        assert "Error: Problem getting data from external service" in result.output
        assert provider.closed
        assert not (data_dir / "query-history.jsonl").exists()


# ---------------------------------------------------------------------------
# history command
# ---------------------------------------------------------------------------


class TestHistoryCmd:
    def test_empty(self, runner, data_dir):
        result = runner.invoke(cli, [*QUIET, "history"])
        assert result.exit_code == 0
        assert "No search history found." in result.output

    def test_text_most_recent_first(self, runner, data_dir):
        _write_history(
            data_dir,
            entry_line("old", "2024-01-01T00:00:00.000Z"),
            entry_line("new", "2024-01-02T00:00:00.000Z"),
        )
        result = runner.invoke(cli, [*QUIET, "history"])
        assert result.exit_code == 0
        assert result.output.index("new") < result.output.index("old")
        assert "# page 1/1 entries=2 page_size=10" in result.output

    def test_json_pagination(self, runner, data_dir):
        _write_history(
            data_dir,
            entry_line("a", "2024-01-01T00:00:00.000Z"),
            entry_line("b", "2024-01-02T00:00:00.000Z"),
            entry_line("c", "2024-01-03T00:00:00.000Z"),
        )
        result = runner.invoke(
            cli, [*QUIET, "history", "--page", "2", "--page-size", "2", "--format", "json"]
        )
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert [e["query"] for e in payload["entries"]] == ["a"]
        assert payload["totalPages"] == 2
        assert payload["currentPage"] == 2

    def test_default_page_size_from_env(self, runner, data_dir, monkeypatch):
        monkeypatch.setenv("SEARCHRELAY_PAGE_SIZE", "1")
        _write_history(
            data_dir,
            entry_line("a", "2024-01-01T00:00:00.000Z"),
            entry_line("b", "2024-01-02T00:00:00.000Z"),
        )
        result = runner.invoke(cli, [*QUIET, "history", "--format", "json"])
        assert json.loads(result.output)["pageSize"] == 1

    def test_explicit_file(self, runner, data_dir, tmp_path):
        other = tmp_path / "elsewhere.jsonl"
        other.write_text(entry_line("elsewhere", "2024-01-01T00:00:00.000Z"), encoding="utf-8")
        result = runner.invoke(cli, [*QUIET, "history", "--file", str(other)])
        assert result.exit_code == 0
        assert "elsewhere" in result.output

    def test_table(self, runner, data_dir):
        _write_history(data_dir, entry_line("tabular", "2024-01-01T00:00:00.000Z"))
        result = runner.invoke(cli, [*QUIET, "history", "--format", "table"])
        assert result.exit_code == 0
        assert "tabular" in result.output

    def test_table_with_markup_like_query(self, runner, data_dir):
        _write_history(data_dir, entry_line("[/]", "2024-01-01T00:00:00.000Z"))
        result = runner.invoke(cli, [*QUIET, "history", "--format", "table"])
        assert result.exit_code == 0
        assert "[/]" in result.output

    def test_warns_about_malformed_lines(self, runner, data_dir):
        _write_history(
            data_dir,
            entry_line("good", "2024-01-01T00:00:00.000Z"),
            "{not json\n",
        )
        result = runner.invoke(cli, [*QUIET, "history"])
        assert result.exit_code == 0
        assert "good" in result.output
        assert "Warning: skipped 1 malformed history line(s)" in result.output

    @pytest.mark.parametrize("args", [["--page", "0"], ["--page-size", "0"]])
    def test_rejects_non_positive(self, runner, data_dir, args):
        result = runner.invoke(cli, [*QUIET, "history", *args])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# serve command
# ---------------------------------------------------------------------------


class TestServeCmd:
    def test_runs_uvicorn(self, runner, data_dir):
        with patch("uvicorn.run") as mock_run:
            result = runner.invoke(cli, [*QUIET, "serve", "--port", "5050", "--host", "0.0.0.0"])
        assert result.exit_code == 0
        assert "Starting API proxy server on http://0.0.0.0:5050" in result.output
        kwargs = mock_run.call_args.kwargs
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 5050

    def test_reload_uses_factory(self, runner, data_dir):
        with patch("uvicorn.run") as mock_run:
            result = runner.invoke(cli, [*QUIET, "serve", "--reload"])
        assert result.exit_code == 0
        assert mock_run.call_args.args == ("searchrelay.server.app:create_app",)
        assert mock_run.call_args.kwargs["factory"] is True

    def test_invalid_environment_name(self, runner, data_dir, monkeypatch):
        monkeypatch.setenv("APP_ENV", "staging")
        with patch("uvicorn.run") as mock_run:
            result = runner.invoke(cli, [*QUIET, "serve"])
        assert result.exit_code == 1
        assert "Environment must be one of" in result.output
        mock_run.assert_not_called()

    def test_port_out_of_range(self, runner, data_dir):
        result = runner.invoke(cli, [*QUIET, "serve", "--port", "70000"])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------


class TestMainFunction:
    def test_calls_cli(self):
        with patch("searchrelay.cli.main.cli") as mock_cli:
            main()
            mock_cli.assert_called_once_with(prog_name="searchrelay")
