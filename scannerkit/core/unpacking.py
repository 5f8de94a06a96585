"""
Archive extraction for downloaded runtimes.

Supported formats:
- .zip
- .tar.gz, .tgz

The format is chosen from the file name alone by UnpackerFactory.create();
unknown suffixes yield None so the caller can refuse the artifact before
downloading or writing anything. Every entry path is validated against the
destination before extraction starts.
"""

import logging
import os
import shutil
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Optional

from scannerkit.core.filesystem import IS_UNIX, FilesystemError, is_relative_to
from scannerkit.core.interfaces import Unpacker

logger = logging.getLogger(__name__)


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


def _entry_destination(name: str, destination: Path) -> Path:
    """
    Map an archive member name to its path under destination.

    Rooted names ("/jre/bin/java", "\\jre\\bin\\java") are re-rooted under
    the destination. Names that still escape it are rejected.

    Raises:
        InsecureArchiveError: If the member would land outside destination
    """
    parts = [
        part
        for part in PurePosixPath(name.replace("\\", "/")).parts
        if part not in ("/", "")
    ]
    if parts and parts[0].endswith(":"):
        # Drive letter, e.g. "C:"
        parts = parts[1:]

    member_path = destination.joinpath(*parts).resolve()
    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{name}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )
    return member_path


def _apply_mode(path: Path, mode: int) -> None:
    """Copy permission bits stored in the archive onto an extracted file."""
    if IS_UNIX and mode:
        os.chmod(path, mode & 0o777)


class ZipUnpacker(Unpacker):
    """Extracts .zip archives."""

    def unpack(self, archive: BinaryIO, destination: Path) -> None:
        destination = Path(destination)
        destination.mkdir(parents=True, exist_ok=True)
        try:
            with zipfile.ZipFile(archive, "r") as zf:
                members = zf.infolist()

                # Validate all paths first
                targets = [
                    (member, _entry_destination(member.filename, destination))
                    for member in members
                ]

                for member, target in targets:
                    if member.is_dir():
                        target.mkdir(parents=True, exist_ok=True)
                        continue
                    target.parent.mkdir(parents=True, exist_ok=True)
                    with zf.open(member) as source, open(target, "wb") as out:
                        shutil.copyfileobj(source, out)
                    # Unix permissions live in the high word of external_attr
                    if member.create_system == 3:
                        _apply_mode(target, member.external_attr >> 16)

                logger.debug(f"Extracted {len(members)} zip entries to {destination}")
        except ArchiveExtractionError:
            raise
        except Exception as e:
            raise ArchiveExtractionError(f"Failed to extract zip archive: {e}") from e


class TarGzUnpacker(Unpacker):
    """
    Extracts gzip-compressed tar archives.

    Hard links and symbolic links are skipped. Regular files keep the
    permission bits recorded in the archive, so executables stay executable.
    """

    def unpack(self, archive: BinaryIO, destination: Path) -> None:
        destination = Path(destination)
        destination.mkdir(parents=True, exist_ok=True)
        try:
            with tarfile.open(fileobj=archive, mode="r:gz") as tar:
                members = tar.getmembers()

                # Validate all paths first
                targets = [
                    (member, _entry_destination(member.name, destination))
                    for member in members
                    if not (member.issym() or member.islnk())
                ]

                for member, target in targets:
                    if member.isdir():
                        target.mkdir(parents=True, exist_ok=True)
                    elif member.isfile():
                        target.parent.mkdir(parents=True, exist_ok=True)
                        source = tar.extractfile(member)
                        with source, open(target, "wb") as out:
                            shutil.copyfileobj(source, out)
                        _apply_mode(target, member.mode)

                logger.debug(f"Extracted {len(targets)} tar entries to {destination}")
        except ArchiveExtractionError:
            raise
        except Exception as e:
            raise ArchiveExtractionError(f"Failed to extract tar.gz archive: {e}") from e


class UnpackerFactory:
    """Selects the unpacker for an archive by file name suffix."""

    def create(self, filename: str) -> Optional[Unpacker]:
        """
        Create the unpacker matching filename.

        Args:
            filename: Archive file name (e.g. "OpenJDK17U-jre_x64_linux.tar.gz")

        Returns:
            Unpacker instance, or None if the format is not supported

        Example:
            >>> UnpackerFactory().create("jre.zip")
            <scannerkit.core.unpacking.ZipUnpacker object at ...>
            >>> UnpackerFactory().create("jre.rar") is None
            True
        """
        name = filename.lower()
        if name.endswith(".zip"):
            return ZipUnpacker()
        if name.endswith((".tar.gz", ".tgz")):
            return TarGzUnpacker()
        return None


__all__ = [
    "ArchiveExtractionError",
    "InsecureArchiveError",
    "ZipUnpacker",
    "TarGzUnpacker",
    "UnpackerFactory",
]
