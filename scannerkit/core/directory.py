"""
Directory locations for scannerkit.

The scanner shares its download cache with the other Sonar scanners, so
it uses the same user home they do.

Directory Structure:
    Sonar user home (~/.sonar/ or %USERPROFILE%\\.sonar\\, or $SONAR_USER_HOME):
        - cache/          : Content-addressable download cache
          - <sha256>/     : One shard per artifact checksum
"""

import os
from pathlib import Path
from typing import Mapping, Optional

SONAR_USER_HOME_ENV = "SONAR_USER_HOME"


def get_sonar_user_home(environ: Optional[Mapping[str, str]] = None) -> Path:
    """
    Get the Sonar user home directory path.

    Args:
        environ: Environment to read (default: os.environ)

    Returns:
        Path: $SONAR_USER_HOME if set, otherwise the platform default.
            - Windows: %USERPROFILE%\\.sonar
            - Linux/macOS: ~/.sonar

    Example:
        >>> get_sonar_user_home({"SONAR_USER_HOME": "/opt/sonar"})
        PosixPath('/opt/sonar')
    """
    environ = os.environ if environ is None else environ

    configured = environ.get(SONAR_USER_HOME_ENV, "").strip()
    if configured:
        return Path(configured)

    if os.name == "nt":
        user_profile = environ.get("USERPROFILE")
        if user_profile:
            return Path(user_profile) / ".sonar"
    return Path.home() / ".sonar"


def get_cache_root(user_home: Optional[Path] = None) -> Path:
    """
    Get the download cache directory.

    Args:
        user_home: Sonar user home (default: get_sonar_user_home())

    Returns:
        Path: <user home>/cache
    """
    return (user_home or get_sonar_user_home()) / "cache"


__all__ = [
    "SONAR_USER_HOME_ENV",
    "get_sonar_user_home",
    "get_cache_root",
]
