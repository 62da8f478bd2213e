"""Tests for the command line interface."""

import asyncio
import json
import sys

import pytest
from unittest.mock import AsyncMock, patch

from quotesync.__main__ import JSONFormatter, main
from quotesync.quotes import DEFAULT_QUOTES


@pytest.fixture(autouse=True)
def isolated_db(tmp_path, monkeypatch):
    """Point the CLI at a temporary database."""
    monkeypatch.setenv("QUOTESYNC_DB_PATH", str(tmp_path / "cli.db"))
    for key in ("QUOTESYNC_SYNC_RESOLUTION", "QUOTESYNC_SYNC_ENABLED", "QUOTESYNC_SYNC_INTERVAL"):
        monkeypatch.delenv(key, raising=False)


def run_cli(monkeypatch, *args: str) -> int:
    monkeypatch.setattr(sys, "argv", ["quotesync", *args])
    return main()


class TestCommands:
    """Tests for individual subcommands."""

    def test_no_command_prints_help(self, monkeypatch, capsys):
        assert run_cli(monkeypatch) == 1
        assert "usage" in capsys.readouterr().out

    def test_add_and_list(self, monkeypatch, capsys):
        assert run_cli(monkeypatch, "add", "Keep going", "Motivation") == 0
        capsys.readouterr()

        assert run_cli(monkeypatch, "list", "--category", "Motivation") == 0

        out = capsys.readouterr().out
        assert '"Keep going" (Motivation)' in out

    def test_add_invalid(self, monkeypatch, capsys):
        assert run_cli(monkeypatch, "add", "   ", "Motivation") == 1
        assert "Error" in capsys.readouterr().err

    def test_categories(self, monkeypatch, capsys):
        assert run_cli(monkeypatch, "categories") == 0

        out = capsys.readouterr().out
        assert out.index("Motivation") < out.index("Life")

    def test_random_unknown_category(self, monkeypatch, capsys):
        assert run_cli(monkeypatch, "random", "--category", "Nope") == 0
        assert "No quotes found" in capsys.readouterr().out

    def test_export_and_import(self, monkeypatch, tmp_path):
        export_path = tmp_path / "export.json"

        assert run_cli(monkeypatch, "export", str(export_path)) == 0
        assert len(json.loads(export_path.read_text(encoding="utf-8"))) == len(DEFAULT_QUOTES)

        assert run_cli(monkeypatch, "import", str(export_path)) == 0
        assert run_cli(monkeypatch, "export", str(export_path)) == 0
        assert len(json.loads(export_path.read_text(encoding="utf-8"))) == 2 * len(DEFAULT_QUOTES)

    def test_import_non_array(self, monkeypatch, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text('{"a": 1}')

        assert run_cli(monkeypatch, "import", str(bad)) == 1
        assert "JSON array" in capsys.readouterr().err

    def test_sync_decline(self, monkeypatch, capsys):
        with patch(
            "quotesync.sync.remote_source.RemoteSource.fetch_candidates",
            new=AsyncMock(return_value=[]),
        ):
            assert run_cli(monkeypatch, "sync", "--decline") == 0

        out = capsys.readouterr().out
        assert "Conflict detected" in out
        assert "kept_local" in out

    def test_status_json(self, monkeypatch, capsys):
        assert run_cli(monkeypatch, "status", "--json") == 0

        status = json.loads(capsys.readouterr().out)
        assert status["quotes"] == len(DEFAULT_QUOTES)
        assert status["last_viewed"] is None

    def test_invalid_config(self, monkeypatch, capsys):
        monkeypatch.setenv("QUOTESYNC_SYNC_RESOLUTION", "maybe")

        assert run_cli(monkeypatch, "list") == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_malformed_env_number(self, monkeypatch, capsys):
        monkeypatch.setenv("QUOTESYNC_SYNC_INTERVAL", "abc")

        assert run_cli(monkeypatch, "list") == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_export_to_missing_directory(self, monkeypatch, tmp_path, capsys):
        target = tmp_path / "missing" / "export.json"

        assert run_cli(monkeypatch, "export", str(target)) == 1
        assert "Error" in capsys.readouterr().err

    def test_run_disabled(self, monkeypatch, capsys):
        monkeypatch.setenv("QUOTESYNC_SYNC_ENABLED", "false")

        assert run_cli(monkeypatch, "run") == 1
        assert "disabled" in capsys.readouterr().err

    def test_run_syncs_then_shuts_down(self, monkeypatch, capsys):
        with patch(
            "quotesync.sync.remote_source.RemoteSource.fetch_candidates",
            new=AsyncMock(return_value=[]),
        ), patch(
            "quotesync.sync.engine.SyncEngine.start",
            new=AsyncMock(side_effect=asyncio.CancelledError),
        ), patch("quotesync.sync.engine.SyncEngine.stop", new=AsyncMock()) as stop:
            assert run_cli(monkeypatch, "run", "--decline") == 0

        out = capsys.readouterr().out
        assert "Conflict detected" in out
        assert "Shutting down" in out
        stop.assert_awaited_once()


class TestJSONFormatter:
    """Tests for structured log output."""

    def test_format(self):
        import logging

        record = logging.LogRecord("quotesync.sync", logging.INFO, "", 0, "hello", None, None)

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["component"] == "quotesync.sync"
        assert data["message"] == "hello"
