"""
Content-addressable file cache.

Layout:
    <user home>/cache/<sha256>/<filename>              verified archive
    <user home>/cache/<sha256>/<filename>_extracted/   published extraction
    <user home>/cache/<sha256>/<random>.tmp            in-flight temp artifacts

The checksum directory ("shard") is the unit of sharing. Several scanner
processes may populate the same shard at once; nothing here takes a lock.
Files enter the shard only by renaming a fully written, verified temp file,
and anything found already present is re-hashed before it is trusted.
"""

import logging
import shutil
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union

from scannerkit.core.checksum import ChecksumSha256, checksums_match
from scannerkit.core.exceptions import ChecksumError, DownloadStreamError
from scannerkit.core.filesystem import FileSystem, delete_best_effort, ensure_directory
from scannerkit.core.interfaces import Checksum

logger = logging.getLogger(__name__)

DownloadSource = Callable[[], Optional[BinaryIO]]


@dataclass(frozen=True)
class FileDescriptor:
    """A cacheable file, identified by its expected SHA-256."""

    filename: str
    """Archive file name as published by the server"""

    sha256: str
    """Expected checksum (hex, compared case-insensitively)"""


# ============================================================================
# Results
# ============================================================================


@dataclass(frozen=True)
class CacheHit:
    """The artifact is usable at path without network access."""

    path: Path


@dataclass(frozen=True)
class CacheMiss:
    """The artifact is not in the cache yet."""


@dataclass(frozen=True)
class CacheFailure:
    """The cache could not answer or could not be populated."""

    message: str


@dataclass(frozen=True)
class DownloadSuccess:
    """A verified copy of the file is stored at path."""

    path: Path


@dataclass(frozen=True)
class DownloadError:
    """The file could not be downloaded or verified."""

    message: str


CacheResult = Union[CacheHit, CacheMiss, CacheFailure]
DownloadResult = Union[DownloadSuccess, DownloadError]


# ============================================================================
# File Cache
# ============================================================================


class FileCache:
    """
    Stores downloaded files under <user home>/cache, one shard per checksum.

    Example:
        >>> cache = FileCache(Path.home() / ".sonar")
        >>> result = cache.ensure_file(descriptor, lambda: server.download_jre(metadata))
        >>> if isinstance(result, DownloadSuccess):
        ...     print(result.path)
    """

    def __init__(
        self,
        user_home: Path,
        fs: Optional[FileSystem] = None,
        checksum: Optional[Checksum] = None,
    ):
        """
        Initialize file cache.

        Args:
            user_home: Sonar user home; the cache lives in its "cache" folder
            fs: Filesystem to operate on (default: real filesystem)
            checksum: Checksum used to verify files (default: SHA-256)
        """
        self.fs = fs or FileSystem()
        self.checksum = checksum or ChecksumSha256.instance
        self.cache_root = Path(user_home) / "cache"

    def shard_path(self, descriptor: FileDescriptor) -> Path:
        """Directory holding everything cached for descriptor's checksum."""
        return self.cache_root / descriptor.sha256.strip().lower()

    def ensure_cache_root(self) -> Path:
        """
        Create the cache root if needed.

        Raises:
            CacheError: If the directory cannot be created
        """
        return ensure_directory(self.fs, self.cache_root)

    def ensure_shard(self, descriptor: FileDescriptor) -> Path:
        """
        Create the cache root and the shard for descriptor if needed.

        Raises:
            CacheError: If either directory cannot be created
        """
        self.ensure_cache_root()
        return ensure_directory(self.fs, self.shard_path(descriptor))

    def ensure_file(
        self, descriptor: FileDescriptor, download: DownloadSource
    ) -> DownloadResult:
        """
        Make sure a verified copy of descriptor's file is in its shard.

        A file already present is re-hashed and reused when it matches; a
        mismatching one is deleted and downloaded again. The shard must exist.

        Args:
            descriptor: File to provide
            download: Opens a stream over the file's bytes; may return None or raise

        Returns:
            DownloadSuccess with the cached path, or DownloadError
        """
        target = self.shard_path(descriptor) / descriptor.filename
        if self.fs.file_exists(target):
            logger.debug(
                f"The file was already downloaded from the server and stored at '{target}'."
            )
            if self._validate_file(target, descriptor) is None:
                return DownloadSuccess(target)
        else:
            logger.debug(f"Cache miss. Could not find '{target}'.")

        return self._download_file(target, descriptor, download)

    def _download_file(
        self, target: Path, descriptor: FileDescriptor, download: DownloadSource
    ) -> DownloadResult:
        error = self._download_and_validate(target, descriptor, download)
        if error is None:
            return DownloadSuccess(target)

        logger.debug(error.message)
        # Another scanner may have finished the same download meanwhile
        if self.fs.file_exists(target):
            logger.debug(
                "The file was found after the download failed. "
                "Another scanner downloaded the file in parallel."
            )
            validation_error = self._validate_file(target, descriptor)
            return validation_error or DownloadSuccess(target)
        return error

    def _download_and_validate(
        self, target: Path, descriptor: FileDescriptor, download: DownloadSource
    ) -> Optional[DownloadError]:
        # Temp file in the shard itself so the final move is a same-directory rename
        temp_file = target.parent / self.fs.random_name()
        logger.debug("Starting the file download.")
        try:
            with self.fs.create_file(temp_file) as out:
                stream = download()
                if stream is None:
                    raise DownloadStreamError()
                with closing(stream) as source:
                    shutil.copyfileobj(source, out)

            validation_error = self._validate_file(temp_file, descriptor)
            if validation_error is not None:
                return DownloadError(
                    "The download of the file from the server failed with the "
                    f"exception '{validation_error.message}'."
                )

            self.fs.move(temp_file, target)
            return None
        except Exception as e:
            delete_best_effort(self.fs, temp_file)
            return DownloadError(
                f"The download of the file from the server failed with the exception '{e}'."
            )

    def _validate_file(
        self, path: Path, descriptor: FileDescriptor
    ) -> Optional[DownloadError]:
        """Check path against the expected checksum, deleting it on mismatch."""
        if self._checksum_matches(path, descriptor.sha256):
            return None
        delete_best_effort(self.fs, path)
        return DownloadError(str(ChecksumError()))

    def _checksum_matches(self, path: Path, expected: str) -> bool:
        try:
            with self.fs.open_read(path) as stream:
                actual = self.checksum.compute_hash(stream)
            logger.debug(
                f"The checksum of the downloaded file is '{actual}' "
                f"and the expected checksum is '{expected}'."
            )
            return checksums_match(actual, expected)
        except Exception as e:
            logger.debug(
                f"The calculation of the checksum of the file '{path}' "
                f"failed with message '{e}'."
            )
            return False


__all__ = [
    "FileDescriptor",
    "CacheHit",
    "CacheMiss",
    "CacheFailure",
    "DownloadSuccess",
    "DownloadError",
    "CacheResult",
    "DownloadResult",
    "FileCache",
]
