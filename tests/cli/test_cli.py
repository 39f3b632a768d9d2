"""Unit tests for CLI commands that work without a running gateway.

Tests CLI behavior using Click's CliRunner for isolated, fast testing.
Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from hookgate import __version__
from hookgate.cli import cli
from hookgate.config import AppConfig
from hookgate.exceptions import ConfigurationError


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner for testing."""
    return CliRunner()


class TestVersion:
    def test_version_flag_shows_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert f"hookgate {__version__}" in result.output


class TestHelp:
    def test_root_help_shows_commands(self, runner: CliRunner) -> None:
        """Given --help, shows available commands and quick start."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("init", "start", "routes", "history", "reload", "status", "config"):
            assert command in result.output
        assert "Quick Start" in result.output


class TestInit:
    """Tests for init command."""

    def test_writes_config(self, runner: CliRunner, isolated_config_path: Path, tmp_path: Path) -> None:
        """Given options, writes a config file reflecting them."""
        # Act
        result = runner.invoke(
            cli,
            [
                "init",
                "--port",
                "4000",
                "--allowlist",
                "A.example,b.example",
                "--history-max",
                "20",
                "--data-dir",
                str(tmp_path / "data"),
                "--timeout",
                "5",
            ],
        )

        # Assert
        assert result.exit_code == 0, result.output
        saved = AppConfig.load_from_files(isolated_config_path)
        assert saved.server.port == 4000
        assert saved.forwarding.allowlist == ["a.example", "b.example"]
        assert saved.history.max_per_key == 20
        assert saved.forwarding.timeout_seconds == 5
        assert saved.admin.token is None
        assert (tmp_path / "data").is_dir()

    def test_generate_token(self, runner: CliRunner, isolated_config_path: Path, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["init", "--generate-token", "--data-dir", str(tmp_path)])

        assert result.exit_code == 0, result.output
        token = AppConfig.load_from_files(isolated_config_path).admin.token
        assert token
        assert token in result.output

    def test_token_and_generate_conflict(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["init", "--token", "x", "--generate-token", "--data-dir", str(tmp_path)])

        assert result.exit_code == 1

    def test_no_timeout(self, runner: CliRunner, isolated_config_path: Path, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["init", "--no-timeout", "--data-dir", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert AppConfig.load_from_files(isolated_config_path).forwarding.timeout_seconds is None

    def test_existing_config_prompts(self, runner: CliRunner, isolated_config_path: Path, tmp_path: Path) -> None:
        """Given an existing config, declining the prompt keeps it."""
        # Arrange
        runner.invoke(cli, ["init", "--port", "4000", "--data-dir", str(tmp_path)])

        # Act
        result = runner.invoke(cli, ["init", "--port", "5000", "--data-dir", str(tmp_path)], input="n\n")

        # Assert
        assert "Aborted" in result.output
        assert AppConfig.load_from_files(isolated_config_path).server.port == 4000

    def test_force_overwrites(self, runner: CliRunner, isolated_config_path: Path, tmp_path: Path) -> None:
        runner.invoke(cli, ["init", "--port", "4000", "--data-dir", str(tmp_path)])

        result = runner.invoke(cli, ["init", "--port", "5000", "--data-dir", str(tmp_path), "--force"])

        assert result.exit_code == 0
        assert AppConfig.load_from_files(isolated_config_path).server.port == 5000


class TestConfigCommands:
    """Tests for config show/path."""

    def test_path(self, runner: CliRunner, isolated_config_path: Path) -> None:
        result = runner.invoke(cli, ["config", "path"])

        assert result.exit_code == 0
        assert str(isolated_config_path) in result.output

    def test_show_json_masks_token(self, runner: CliRunner, isolated_config_path: Path) -> None:
        """Given a config with a token, show --json never prints it."""
        # Arrange
        AppConfig.model_validate({"admin": {"token": "super-secret"}, "server": {"port": 4100}}).save_to_file(
            isolated_config_path
        )

        # Act
        result = runner.invoke(cli, ["config", "show", "--json"])

        # Assert
        assert result.exit_code == 0, result.output
        assert "super-secret" not in result.output
        data = json.loads(result.output)
        assert data["server"]["port"] == 4100
        assert data["admin"]["token"] == "(set)"
        assert data["_computed"]["config_file"] == str(isolated_config_path)

    def test_show_applies_env(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOOKGATE_PORT", "4242")

        result = runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 0, result.output
        assert "port: 4242" in result.output

    def test_show_invalid_config(self, runner: CliRunner, isolated_config_path: Path) -> None:
        isolated_config_path.parent.mkdir(parents=True)
        isolated_config_path.write_text("{oops")

        result = runner.invoke(cli, ["config", "show"])

        assert result.exit_code == ConfigurationError.exit_code


class TestStart:
    """Tests for start command."""

    def test_runs_gateway_with_overrides(self, runner: CliRunner) -> None:
        with patch("hookgate.cli.commands.start.run_gateway") as mock_run:
            result = runner.invoke(cli, ["start", "--port", "9999", "--host", "0.0.0.0"])

        assert result.exit_code == 0, result.output
        config = mock_run.call_args.args[0]
        assert config.server.port == 9999
        assert config.server.host == "0.0.0.0"

    def test_invalid_env_exits_with_config_code(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOOKGATE_PORT", "nope")

        with patch("hookgate.cli.commands.start.run_gateway") as mock_run:
            result = runner.invoke(cli, ["start"])

        assert result.exit_code == ConfigurationError.exit_code
        mock_run.assert_not_called()

    def test_invalid_routes_file(self, runner: CliRunner) -> None:
        """Given run_gateway rejecting the routes file, exits with the config code."""
        with patch(
            "hookgate.cli.commands.start.run_gateway",
            side_effect=ConfigurationError("Invalid routes file"),
        ):
            result = runner.invoke(cli, ["start"])

        assert result.exit_code == ConfigurationError.exit_code
        assert "Invalid routes file" in result.output

    def test_explicit_config_file(self, runner: CliRunner, tmp_path: Path) -> None:
        # Arrange
        path = tmp_path / "other.json"
        AppConfig.model_validate({"server": {"port": 4321}}).save_to_file(path)

        # Act
        with patch("hookgate.cli.commands.start.run_gateway") as mock_run:
            result = runner.invoke(cli, ["start", "--config", str(path)])

        # Assert
        assert result.exit_code == 0, result.output
        assert mock_run.call_args.args[0].server.port == 4321
