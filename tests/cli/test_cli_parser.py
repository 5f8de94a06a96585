"""
Tests for CLI argument parser.
"""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from scannerkit.cli.parser import CLI, main


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo the root logger changes CLI.run makes."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_creation(self):
        """Test CLI can be created."""
        cli = CLI()
        assert cli.parser is not None

    def test_no_command_shows_help(self, capsys):
        """Test that running without command shows help."""
        result = CLI().run([])

        assert result == 1
        captured = capsys.readouterr()
        assert "usage:" in captured.out.lower()

    def test_version_flag(self, capsys):
        """Test --version flag."""
        with pytest.raises(SystemExit) as exc_info:
            CLI().run(["--version"])

        assert exc_info.value.code == 0
        assert "scannerkit" in capsys.readouterr().out

    def test_unknown_command(self):
        """Test unknown commands are rejected by argparse."""
        with pytest.raises(SystemExit):
            CLI().parse_args(["bootstrap"])


class TestGlobalOptions:
    """Test global options."""

    def test_defines_are_repeatable(self):
        args = CLI().parse_args(
            ["-D", "sonar.scanner.os=linux", "--define", "sonar.scanner.arch=x64", "provision"]
        )
        assert args.define == ["sonar.scanner.os=linux", "sonar.scanner.arch=x64"]

    def test_defaults(self):
        args = CLI().parse_args(["provision"])
        assert args.define == []
        assert args.config is None
        assert args.verbose is False
        assert args.quiet is False

    def test_config_path(self):
        args = CLI().parse_args(["--config", "custom.yaml", "provision"])
        assert args.config == Path("custom.yaml")


class TestCacheInfoCommand:
    """Test cache-info command parsing."""

    def test_entry_options(self):
        args = CLI().parse_args(
            ["cache-info", "--sha256", "abc", "--filename", "jre.zip", "--java-path", "bin/java"]
        )

        assert args.command == "cache-info"
        assert args.sha256 == "abc"
        assert args.filename == "jre.zip"
        assert args.java_path == "bin/java"

    def test_entry_options_default_to_none(self):
        args = CLI().parse_args(["cache-info"])
        assert (args.sha256, args.filename, args.java_path) == (None, None, None)


class TestLogging:
    """Test logging configuration."""

    @pytest.mark.parametrize(
        "flags,level",
        [(["-v"], logging.DEBUG), (["-q"], logging.ERROR), ([], logging.INFO)],
    )
    def test_levels(self, flags, level):
        cli = CLI()
        cli._configure_logging(cli.parse_args(flags + ["provision"]))
        assert logging.getLogger().level == level


class TestDispatch:
    """Test command dispatch and error handling."""

    @patch("scannerkit.cli.commands.provision.run", return_value=0)
    def test_dispatch_provision(self, mock_run):
        assert CLI().run(["provision"]) == 0
        mock_run.assert_called_once()

    @patch("scannerkit.cli.commands.cache_info.run", return_value=0)
    def test_dispatch_cache_info(self, mock_run):
        assert CLI().run(["cache-info"]) == 0
        mock_run.assert_called_once()

    @patch("scannerkit.cli.commands.provision.run", side_effect=RuntimeError("boom"))
    def test_exception_returns_one(self, mock_run):
        assert CLI().run(["provision"]) == 1

    @patch("scannerkit.cli.commands.provision.run", side_effect=KeyboardInterrupt())
    def test_keyboard_interrupt(self, mock_run):
        assert CLI().run(["provision"]) == 130

    def test_invalid_property_returns_one(self):
        """Test configuration errors fail the command."""
        assert CLI().run(["-D", "novalue", "provision"]) == 1

    def test_main_exits_with_code(self):
        with patch("sys.argv", ["scannerkit"]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1
