"""
Centralized exception hierarchy for scannerkit.

Primitive operations raise these exceptions; the cache layer converts
them into result values (CacheFailure, DownloadError) so callers can
match on the kind of outcome instead of catching.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class ScannerKitError(Exception):
    """Base exception for all scannerkit errors."""

    pass


# ============================================================================
# Cache Exceptions
# ============================================================================


class CacheError(ScannerKitError):
    """Raised when a cache directory cannot be created or used."""

    pass


class ChecksumError(CacheError):
    """Raised when a file does not hash to its expected checksum."""

    def __init__(self):
        super().__init__(
            "The checksum of the downloaded file does not match the expected checksum."
        )


class DownloadStreamError(CacheError):
    """Raised when the download source hands back no stream."""

    def __init__(self):
        super().__init__(
            "The download stream is null. "
            "The server likely returned an error status code."
        )


# ============================================================================
# Server Exceptions
# ============================================================================


class ServerError(ScannerKitError):
    """Base exception for server communication errors."""

    pass


class ServerVersionError(ServerError):
    """Raised when the server version cannot be determined."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(ScannerKitError):
    """Configuration parsing or validation error."""

    pass


__all__ = [
    "ScannerKitError",
    "CacheError",
    "ChecksumError",
    "DownloadStreamError",
    "ServerError",
    "ServerVersionError",
    "ConfigError",
]
