"""
Shared utilities for CLI commands.
"""

import sys
from typing import Optional

from scannerkit.config.settings import ScannerSettings, load_settings, parse_properties


def settings_from_args(args) -> ScannerSettings:
    """
    Build settings from the global --config and -D options.

    Raises:
        ConfigError: If the config file or a property is invalid
    """
    properties = parse_properties(getattr(args, "define", None))
    return load_settings(config_file=getattr(args, "config", None), properties=properties)


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


__all__ = ["settings_from_args", "print_error"]
