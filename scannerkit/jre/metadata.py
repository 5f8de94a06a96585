"""
JRE descriptors and server metadata.

The server describes each JRE it offers with a JSON object; the cache only
needs the archive name, its checksum and where java lives inside it.
"""

from dataclasses import dataclass
from pathlib import PurePosixPath, PureWindowsPath
from typing import Any, Dict, Optional

from scannerkit.core.cache import FileDescriptor


def validate_java_path(java_path: str) -> None:
    """
    Check that java_path stays inside the extracted archive.

    Raises:
        ValueError: If java_path is empty, absolute, has a drive, or uses '..'
    """
    if not java_path:
        raise ValueError("Java path cannot be empty")
    posix = PurePosixPath(java_path.replace("\\", "/"))
    windows = PureWindowsPath(java_path)
    if posix.is_absolute() or windows.drive or windows.root or ".." in posix.parts:
        raise ValueError(
            f"Java path must be relative to the archive root: '{java_path}'"
        )


@dataclass(frozen=True)
class JreDescriptor(FileDescriptor):
    """A cacheable JRE archive."""

    java_path: str
    """Path of the java executable relative to the extracted archive root"""

    def __post_init__(self):
        validate_java_path(self.java_path)


@dataclass
class JreMetadata:
    """JRE entry as returned by the server's analysis/jres endpoint."""

    id: str
    """Server-side identifier used to download the archive"""

    filename: str
    """Archive file name (e.g., OpenJDK17U-jre_x64_linux_hotspot_17.0.11_9.tar.gz)"""

    sha256: str
    """SHA256 checksum of the archive"""

    java_path: str
    """Relative path of the java executable after extraction"""

    download_url: Optional[str] = None
    """Direct download URL (used by SonarCloud)"""

    os: str = ""
    arch: str = ""

    def __post_init__(self):
        """Validate metadata after initialization."""
        if not self.filename:
            raise ValueError("Filename cannot be empty")
        if not self.sha256:
            raise ValueError("SHA256 cannot be empty")
        validate_java_path(self.java_path)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "JreMetadata":
        """
        Build metadata from a server JSON object.

        Raises:
            ValueError: If required keys are missing or empty
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
        return cls(
            id=str(data.get("id") or ""),
            filename=data.get("filename") or "",
            sha256=data.get("sha256") or "",
            java_path=data.get("javaPath") or "",
            download_url=data.get("downloadUrl"),
            os=data.get("os") or "",
            arch=data.get("arch") or "",
        )

    def to_descriptor(self) -> JreDescriptor:
        return JreDescriptor(
            filename=self.filename, sha256=self.sha256, java_path=self.java_path
        )


__all__ = [
    "JreDescriptor",
    "JreMetadata",
    "validate_java_path",
]
