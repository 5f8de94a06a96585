"""
scannerkit CLI argument parser.

This module implements the command-line interface for scannerkit using argparse.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from scannerkit import __version__

logger = logging.getLogger(__name__)


class CLI:
    """scannerkit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="scannerkit",
            description="scannerkit - Java runtime provisioning for Sonar scanners",
            epilog='Use "scannerkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"scannerkit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./scannerkit.yaml)",
        )
        parser.add_argument(
            "-D",
            "--define",
            action="append",
            default=[],
            metavar="KEY=VALUE",
            help="Set an analysis property (e.g. -D sonar.host.url=https://...)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_provision_command(subparsers)
        self._add_cache_info_command(subparsers)

        return parser

    def _add_provision_command(self, subparsers):
        """Add 'provision' subcommand."""
        subparsers.add_parser(
            "provision",
            help="Provision a JRE from the server",
            description=(
                "Resolve the Java runtime for this platform, downloading it into "
                "the cache if needed, and print the path of the java executable"
            ),
        )

    def _add_cache_info_command(self, subparsers):
        """Add 'cache-info' subcommand."""
        parser = subparsers.add_parser(
            "cache-info",
            help="Show the JRE cache location and entries",
            description="Show the cache root and check whether a JRE is cached",
        )
        parser.add_argument("--sha256", metavar="HASH", help="Archive checksum")
        parser.add_argument("--filename", metavar="NAME", help="Archive file name")
        parser.add_argument(
            "--java-path",
            metavar="PATH",
            help="Path of the java executable inside the archive",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        # Command module mapping
        command_map = {
            "provision": "scannerkit.cli.commands.provision",
            "cache-info": "scannerkit.cli.commands.cache_info",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        import importlib

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
