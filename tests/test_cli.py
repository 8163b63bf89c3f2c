"""Tests for clu.cli (typer app)."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from clu.cli import TIMEOUT_EXIT_CODE, app

runner = CliRunner()

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses sh syntax")


@posix_only
class TestRun:
    def test_echo(self) -> None:
        result = runner.invoke(app, ["run", "echo hi"])
        assert result.exit_code == 0
        assert "hi" in result.output

    def test_exit_status_is_forwarded(self) -> None:
        result = runner.invoke(app, ["run", "exit 3"])
        assert result.exit_code == 3

    def test_break_on_error_reports(self) -> None:
        result = runner.invoke(app, ["run", "echo bad >&2; exit 4", "--break-on-error"])
        assert result.exit_code == 4
        assert "Error:" in result.output

    def test_timeout(self) -> None:
        result = runner.invoke(app, ["run", "sleep 1", "--timeout-ms", "50"])
        assert result.exit_code == TIMEOUT_EXIT_CODE

    def test_directory(self, tmp_path: Path) -> None:
        (tmp_path / "inside.txt").write_text("x")
        result = runner.invoke(app, ["run", "ls", "--dir", str(tmp_path)])
        assert result.exit_code == 0
        assert "inside.txt" in result.output

    def test_missing_directory(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["run", "ls", "--dir", str(tmp_path / "nope")])
        assert result.exit_code != 0

    def test_legacy_status(self) -> None:
        result = runner.invoke(app, ["run", "echo warn >&2", "--legacy-status"])
        assert result.exit_code == 2

    def test_config_file(self, tmp_path: Path) -> None:
        path = tmp_path / "clu.json"
        path.write_text(json.dumps({"break_on_error": True}))
        result = runner.invoke(app, ["run", "exit 6", "--config", str(path)])
        assert result.exit_code == 6
        assert "Error:" in result.output


class TestOs:
    def test_os_info(self) -> None:
        result = runner.invoke(app, ["os"])
        assert result.exit_code == 0
        assert "OS:" in result.output
        assert "Kill command:" in result.output


class TestHelp:
    def test_no_args_shows_help(self) -> None:
        result = runner.invoke(app, [])
        assert "run" in result.output
