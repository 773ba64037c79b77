"""Tests for monoseq.cli."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from monoseq.cli import cli
from monoseq.errors import DirtyWorkspaceError


class TestCli:
    def test_missing_task(self) -> None:
        result = CliRunner().invoke(cli, [])
        assert result.exit_code == 1
        assert "Missing task" in result.output

    def test_unknown_task(self) -> None:
        result = CliRunner().invoke(cli, ["deploy"])
        assert result.exit_code == 2
        assert "Unknown task 'deploy'" in result.output

    def test_run_requires_script_name(self) -> None:
        result = CliRunner().invoke(cli, ["run"])
        assert result.exit_code == 2

    @patch("monoseq.cli.run_on_packages")
    def test_success(self, mock_run: MagicMock, tmp_path: Path) -> None:
        result = CliRunner().invoke(cli, ["--root", str(tmp_path), "bootstrap"])

        assert result.exit_code == 0
        assert "Successful command: bootstrap" in result.output
        config, command, args = mock_run.call_args[0]
        assert config.root == tmp_path.resolve()
        assert command == "bootstrap"
        assert args == ()

    @patch("monoseq.cli.run_on_packages")
    def test_passes_npm_arguments_through(self, mock_run: MagicMock, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            cli, ["--root", str(tmp_path), "npm", "install", "--save-dev", "ava"]
        )

        assert result.exit_code == 0
        assert mock_run.call_args[0][2] == ("install", "--save-dev", "ava")

    @patch("monoseq.cli.run_on_packages")
    def test_failure_reports_error(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = DirtyWorkspaceError("Git workspace not clean!")

        result = CliRunner().invoke(cli, ["--root", str(tmp_path), "release"])

        assert result.exit_code == 1
        assert "Failed command: release" in result.output
        assert "Git workspace not clean!" in result.output
        assert "Traceback" in result.output
