"""
Core functionality for scannerkit.

This package contains the foundational modules the JRE cache is built on.
"""

from .cache import (
    FileDescriptor,
    CacheHit,
    CacheMiss,
    CacheFailure,
    DownloadSuccess,
    DownloadError,
    FileCache,
)

from .checksum import (
    ChecksumSha256,
    StreamingHasher,
    checksums_match,
)

from .directory import (
    get_sonar_user_home,
    get_cache_root,
)

from .filesystem import (
    FileSystem,
    ensure_directory,
    delete_best_effort,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
)

from .unpacking import (
    UnpackerFactory,
    ZipUnpacker,
    TarGzUnpacker,
    ArchiveExtractionError,
    InsecureArchiveError,
)

from .exceptions import (
    ScannerKitError,
    CacheError,
    ChecksumError,
    DownloadStreamError,
    ServerError,
    ServerVersionError,
    ConfigError,
)

__all__ = [
    "FileDescriptor",
    "CacheHit",
    "CacheMiss",
    "CacheFailure",
    "DownloadSuccess",
    "DownloadError",
    "FileCache",
    "ChecksumSha256",
    "StreamingHasher",
    "checksums_match",
    "get_sonar_user_home",
    "get_cache_root",
    "FileSystem",
    "ensure_directory",
    "delete_best_effort",
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
    "UnpackerFactory",
    "ZipUnpacker",
    "TarGzUnpacker",
    "ArchiveExtractionError",
    "InsecureArchiveError",
    "ScannerKitError",
    "CacheError",
    "ChecksumError",
    "DownloadStreamError",
    "ServerError",
    "ServerVersionError",
    "ConfigError",
]
