"""
Core interfaces for scannerkit.

This module defines the abstract seams the JRE cache depends on. Concrete
implementations live next to their concern (checksum, unpacking, server);
tests substitute their own.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Optional


class Checksum(ABC):
    """Computes a hex digest of a byte stream."""

    @abstractmethod
    def compute_hash(self, stream: BinaryIO) -> str:
        """
        Hash the stream from its current position to the end.

        Args:
            stream: Readable binary stream

        Returns:
            Hex digest string
        """
        pass


class Unpacker(ABC):
    """Extracts one archive format into a directory."""

    @abstractmethod
    def unpack(self, archive: BinaryIO, destination: Path) -> None:
        """
        Extract the full archive tree into destination.

        Args:
            archive: Readable binary stream positioned at the archive start
            destination: Directory to extract into (created if missing)

        Raises:
            ArchiveExtractionError: If the archive is corrupt or cannot be written
        """
        pass


class JreServer(ABC):
    """
    Remote server that advertises and serves JRE archives.

    The resolver only needs these three operations; the HTTP details
    belong to the implementation.
    """

    @property
    @abstractmethod
    def supports_jre_provisioning(self) -> bool:
        """Whether the server can hand out JRE archives at all."""
        pass

    @abstractmethod
    def download_jre_metadata(self, operating_system: str, architecture: str):
        """
        Fetch the JRE metadata for a platform.

        Args:
            operating_system: Target OS (e.g. "linux", "windows")
            architecture: Target architecture (e.g. "x64", "aarch64")

        Returns:
            JreMetadata, or None if the server has nothing for this platform
        """
        pass

    @abstractmethod
    def download_jre(self, metadata) -> Optional[BinaryIO]:
        """
        Open a stream over the JRE archive described by metadata.

        Args:
            metadata: JreMetadata returned by download_jre_metadata

        Returns:
            Readable binary stream, or None
        """
        pass


__all__ = [
    "Checksum",
    "Unpacker",
    "JreServer",
]
