"""
JRE download and extraction.

This module puts a JRE into the shared cache:
1. Check whether an extracted JRE is already published
2. Refuse archive formats no unpacker handles (before any file I/O)
3. Create the checksum shard
4. Reuse or download the archive, verifying its checksum
5. Extract into a random sibling directory and verify java is there
6. Rename the extraction into place, moving aside a published folder that
   lacks java

The published directory only ever appears through a single rename, so
concurrent scanners see either nothing or a complete JRE.
"""

import logging
from pathlib import Path
from typing import Optional

from scannerkit.core.cache import (
    CacheFailure,
    CacheHit,
    CacheMiss,
    CacheResult,
    DownloadError,
    DownloadSource,
    DownloadSuccess,
    FileCache,
)
from scannerkit.core.directory import get_sonar_user_home
from scannerkit.core.exceptions import CacheError
from scannerkit.core.filesystem import FileSystem, delete_best_effort, is_relative_to
from scannerkit.core.interfaces import Checksum, Unpacker
from scannerkit.core.unpacking import ArchiveExtractionError, UnpackerFactory
from scannerkit.jre.metadata import JreDescriptor

logger = logging.getLogger(__name__)


class JreDownloader:
    """
    Provides JREs from the content-addressable cache.

    Example:
        >>> downloader = JreDownloader()
        >>> result = downloader.is_jre_cached(descriptor)
        >>> if isinstance(result, CacheMiss):
        ...     result = downloader.download_jre(descriptor, lambda: server.download_jre(metadata))
        >>> if isinstance(result, CacheHit):
        ...     print(f"java at: {result.path}")
    """

    def __init__(
        self,
        user_home: Optional[Path] = None,
        fs: Optional[FileSystem] = None,
        checksum: Optional[Checksum] = None,
        unpacker_factory: Optional[UnpackerFactory] = None,
    ):
        """
        Initialize JRE downloader.

        Args:
            user_home: Sonar user home. If None, uses get_sonar_user_home().
            fs: Filesystem to operate on (default: real filesystem)
            checksum: Checksum used to verify archives (default: SHA-256)
            unpacker_factory: Selects unpackers by archive name
        """
        self.file_cache = FileCache(user_home or get_sonar_user_home(), fs, checksum)
        self.fs = self.file_cache.fs
        self.unpacker_factory = unpacker_factory or UnpackerFactory()

        logger.debug(f"Initialized JRE downloader with cache: {self.cache_root}")

    @property
    def cache_root(self) -> Path:
        return self.file_cache.cache_root

    def extraction_path(self, descriptor: JreDescriptor) -> Path:
        """Final location of the extracted archive inside its shard."""
        return self.file_cache.shard_path(descriptor) / f"{descriptor.filename}_extracted"

    def is_jre_cached(self, descriptor: JreDescriptor) -> CacheResult:
        """
        Check whether descriptor's JRE is usable without network access.

        An extraction directory without the java executable counts as a
        miss; downloading again repairs it.

        Args:
            descriptor: JRE to look up

        Returns:
            CacheHit with the java executable path, CacheMiss, or CacheFailure
            when the cache root cannot be created
        """
        try:
            self.file_cache.ensure_cache_root()
        except CacheError as e:
            return CacheFailure(str(e))

        extracted_path = self.extraction_path(descriptor)
        java_exe = extracted_path / descriptor.java_path
        if not self.fs.directory_exists(extracted_path):
            logger.debug(f"Cache miss. Could not find '{java_exe}'.")
            return CacheMiss()
        if not self.fs.file_exists(java_exe):
            logger.debug(
                f"Cache miss. The folder '{extracted_path}' exists "
                f"but does not contain '{descriptor.java_path}'."
            )
            return CacheMiss()
        return CacheHit(java_exe)

    def download_jre(
        self, descriptor: JreDescriptor, download: DownloadSource
    ) -> CacheResult:
        """
        Download, verify, extract and publish descriptor's JRE.

        Args:
            descriptor: JRE to provide
            download: Opens a stream over the archive; may return None or raise

        Returns:
            CacheHit with the java executable path, or CacheFailure
        """
        # No point downloading an archive we cannot unpack
        unpacker = self.unpacker_factory.create(descriptor.filename)
        if unpacker is None:
            return CacheFailure(
                f"The archive format of '{descriptor.filename}' is not supported."
            )

        try:
            self.file_cache.ensure_shard(descriptor)
        except CacheError as e:
            return CacheFailure(str(e))

        result = self.file_cache.ensure_file(descriptor, download)
        if isinstance(result, DownloadError):
            return CacheFailure(result.message)
        elif isinstance(result, DownloadSuccess):
            return self._unpack(unpacker, result.path, descriptor)
        raise TypeError(f"Unexpected download result: {result!r}")

    def _unpack(
        self, unpacker: Unpacker, archive: Path, descriptor: JreDescriptor
    ) -> CacheResult:
        # Extract next to the final folder so publishing is a same-directory rename
        temp_path = self.file_cache.shard_path(descriptor) / self.fs.random_name()
        final_path = self.extraction_path(descriptor)
        final_java = final_path / descriptor.java_path
        try:
            logger.debug(
                f"Starting to extract files from archive '{archive}' to folder '{temp_path}'."
            )
            with self.fs.open_read(archive) as stream:
                unpacker.unpack(stream, temp_path)

            expected_java = temp_path / descriptor.java_path
            if not is_relative_to(expected_java.resolve(), temp_path.resolve()):
                raise ArchiveExtractionError(
                    f"The java executable path '{descriptor.java_path}' points outside "
                    f"of the extracted Java runtime environment '{temp_path}'."
                )
            if not self.fs.file_exists(expected_java):
                raise ArchiveExtractionError(
                    "The java executable in the extracted Java runtime environment "
                    f"was expected to be at '{expected_java}' but couldn't be found."
                )

            self._discard_incomplete(final_path, final_java)
            logger.debug(f"Moving extracted files from '{temp_path}' to '{final_path}'.")
            self.fs.move(temp_path, final_path)
            logger.debug(f"The archive was successfully extracted to '{final_path}'.")
            return CacheHit(final_java)
        except Exception as e:
            logger.debug(
                f"The extraction of the downloaded Java runtime environment failed with error '{e}'."
            )
            delete_best_effort(self.fs, temp_path, directory=True)
            # Another scanner may have published the same JRE meanwhile
            if self.fs.file_exists(final_java):
                logger.debug(
                    f"The Java runtime environment was found at '{final_java}' after the "
                    "extraction failed. Another scanner extracted it in parallel."
                )
                return CacheHit(final_java)
            return CacheFailure(
                f"The downloaded Java runtime environment could not be extracted. {e}"
            )

    def _discard_incomplete(self, final_path: Path, final_java: Path) -> None:
        """Move a published folder that lacks java out of the way."""
        if not self.fs.directory_exists(final_path) or self.fs.file_exists(final_java):
            return
        # Rename first so the final name is free even if the delete fails
        stale_path = final_path.parent / self.fs.random_name()
        logger.debug(
            f"The folder '{final_path}' does not contain '{final_java.name}'. "
            f"Moving it to '{stale_path}' for deletion."
        )
        try:
            self.fs.move(final_path, stale_path)
        except OSError as e:
            logger.debug(f"Moving '{final_path}' aside failed: {e}")
            return
        delete_best_effort(self.fs, stale_path, directory=True)


__all__ = [
    "JreDownloader",
]
