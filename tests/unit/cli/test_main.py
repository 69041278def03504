"""Unit tests for CLI main entry point."""

import logging

import pytest
from click.testing import CliRunner

from crm_engine.cli import __version__, cli


class TestCLIMain:
    """Test suite for CLI main entry point."""

    @pytest.fixture
    def runner(self):
        """Create a Click CLI test runner."""
        return CliRunner()

    def test_cli_group_exists(self, runner):
        """Test that CLI group exists and can be invoked."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Usage:" in result.output

    def test_cli_help_text(self, runner):
        """Test that CLI help text is informative."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "CRM engine CLI" in result.output
        assert "Commands:" in result.output

    def test_cli_version_flag(self, runner):
        """Test that --version flag works."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    @pytest.mark.parametrize("command", ["execute", "budget", "margins", "list-records", "help-text"])
    def test_cli_registers_command(self, runner, command):
        """Test that each command is registered."""
        result = runner.invoke(cli, ["--help"])
        assert command in result.output

    def test_unknown_command_shows_error(self, runner):
        """Test that unknown commands show helpful error."""
        result = runner.invoke(cli, ["unknown-command"])
        assert result.exit_code != 0
        assert "No such command" in result.output or "Error" in result.output

    def test_log_level_configures_logging(self, runner):
        """Test that --log-level sets the root logger level."""
        try:
            result = runner.invoke(cli, ["--log-level", "warning", "help-text"])

            assert result.exit_code == 0
            assert logging.getLogger().level == logging.WARNING
        finally:
            logging.getLogger().handlers.clear()

    def test_invalid_log_level(self, runner):
        """Test that an unknown log level is rejected."""
        result = runner.invoke(cli, ["--log-level", "LOUD", "help-text"])
        assert result.exit_code == 2
