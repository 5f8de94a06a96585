"""
Platform detection for scannerkit.

Maps the running machine onto the operating system and architecture names
the server uses to select a JRE:

- OS: 'windows', 'linux', 'alpine', 'macos'
- Architecture: 'x64', 'aarch64'

Anything else detects as an empty string, which makes the resolver skip
provisioning instead of asking the server for a platform it cannot serve.

Usage:
    from scannerkit.core.platform import detect_platform

    info = detect_platform()
    print(f"OS: {info.os}, arch: {info.arch}")
"""

import functools
import platform
from dataclasses import dataclass

import distro


@dataclass
class PlatformInfo:
    """
    Platform as reported to the server.

    Attributes:
        os: Operating system ('windows', 'linux', 'alpine', 'macos') or ''
        arch: CPU architecture ('x64', 'aarch64') or ''
    """

    os: str
    arch: str

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x64', 'macos-aarch64').

        Example:
            >>> PlatformInfo('linux', 'x64').platform_string()
            'linux-x64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.
    """
    return PlatformInfo(os=detect_os(), arch=detect_architecture())


def detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name, or '' if not one the server knows
    """
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "linux":
        # Alpine ships musl, so it needs its own JRE build
        if distro.id() == "alpine":
            return "alpine"
        return "linux"
    elif system == "darwin":
        return "macos"
    return ""


def detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'aarch64', or '' if unsupported
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "aarch64"
    return ""


def clear_platform_cache():
    """
    Clear the platform detection cache.

    Forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "detect_platform",
    "detect_os",
    "detect_architecture",
    "clear_platform_cache",
]
