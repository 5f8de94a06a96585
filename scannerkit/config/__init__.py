"""Configuration loading for scannerkit."""

from .settings import (
    ScannerSettings,
    parse_properties,
    load_config_file,
    load_settings,
)

__all__ = [
    "ScannerSettings",
    "parse_properties",
    "load_config_file",
    "load_settings",
]
