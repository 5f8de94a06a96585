"""
Filesystem primitives for the artifact cache.

This module provides the operations the cache is built from:
- An injectable FileSystem wrapper (existence checks, create, open, move, delete)
- Idempotent directory creation with a uniform failure
- Single-rename publishing of temp files and directories
- Best-effort deletion that logs instead of raising
- Random temp names that do not collide between processes

Every cache component takes a FileSystem so tests can observe or fail
individual operations without touching real disk state.
"""

import logging
import os
import secrets
import shutil
import sys
from pathlib import Path
from typing import BinaryIO, Union

from scannerkit.core.exceptions import CacheError

logger = logging.getLogger(__name__)

# Platform detection
IS_WINDOWS = os.name == "nt"
IS_UNIX = not IS_WINDOWS


# ============================================================================
# Error Handling
# ============================================================================


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    pass


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Args:
        path: Path to check
        parent: Parent directory

    Returns:
        True if path is under parent directory

    Example:
        >>> is_relative_to(Path("/home/user/.sonar/cache/x"), Path("/home/user"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


# ============================================================================
# FileSystem Wrapper
# ============================================================================


class FileSystem:
    """
    Thin wrapper over the OS filesystem calls the cache uses.

    Methods raise the underlying OSError unchanged; callers decide what a
    failure means for them.
    """

    def file_exists(self, path: Union[str, Path]) -> bool:
        return Path(path).is_file()

    def directory_exists(self, path: Union[str, Path]) -> bool:
        return Path(path).is_dir()

    def create_directory(self, path: Union[str, Path]) -> None:
        """Create a directory and any missing parents."""
        Path(path).mkdir(parents=True, exist_ok=True)

    def open_read(self, path: Union[str, Path]) -> BinaryIO:
        return open(path, "rb")

    def create_file(self, path: Union[str, Path]) -> BinaryIO:
        """Create (or truncate) a file for binary writing."""
        return open(path, "wb")

    def move(self, source: Union[str, Path], destination: Union[str, Path]) -> None:
        """
        Rename source to destination in a single filesystem operation.

        Works for files and directories. Source and destination must be on
        the same filesystem; there is no copy fallback.
        """
        os.replace(source, destination)

    def delete_file(self, path: Union[str, Path]) -> None:
        Path(path).unlink()

    def delete_directory(self, path: Union[str, Path]) -> None:
        """Remove a directory tree."""
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, 0o777)
                    func(path)
                else:
                    raise

            if sys.version_info >= (3, 12):
                shutil.rmtree(path, onexc=handle_remove_readonly)
            else:
                shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)

    def random_name(self) -> str:
        """Return a random file name, unique enough across processes."""
        return f"{secrets.token_hex(6)}.tmp"


# ============================================================================
# Cache Primitives
# ============================================================================


def ensure_directory(fs: FileSystem, path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists (idempotent).

    Args:
        fs: FileSystem to operate on
        path: Directory path

    Returns:
        The directory path

    Raises:
        CacheError: If the directory does not exist and cannot be created

    Example:
        >>> ensure_directory(FileSystem(), Path.home() / ".sonar" / "cache")
    """
    path = Path(path)
    try:
        if not fs.directory_exists(path):
            fs.create_directory(path)
    except FileExistsError:
        # Lost a creation race against another process
        if not fs.directory_exists(path):
            raise CacheError(f"The directory '{path}' could not be created.")
    except (OSError, ValueError, NotImplementedError) as e:
        logger.debug(f"Creating directory '{path}' failed: {e}")
        raise CacheError(f"The directory '{path}' could not be created.") from e
    return path


def delete_best_effort(
    fs: FileSystem, path: Union[str, Path], directory: bool = False
) -> None:
    """
    Delete a file or directory, logging instead of raising on failure.

    Cleanup must never hide the failure that triggered it.

    Args:
        fs: FileSystem to operate on
        path: File or directory to delete
        directory: True to remove a directory tree
    """
    try:
        if directory:
            logger.debug(f"Deleting directory '{path}'.")
            fs.delete_directory(path)
        else:
            logger.debug(f"Deleting file '{path}'.")
            fs.delete_file(path)
    except Exception as e:
        logger.debug(f"Failed to delete '{path}': {e}")


__all__ = [
    "IS_WINDOWS",
    "IS_UNIX",
    "FilesystemError",
    "is_relative_to",
    "FileSystem",
    "ensure_directory",
    "delete_best_effort",
]
