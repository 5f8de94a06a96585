"""
Unit tests for the platform detection module.

Tests cover:
- PlatformInfo dataclass methods
- OS detection with mocking (including Alpine)
- Architecture normalization
- Cache behavior
"""

import pytest
from unittest.mock import patch

from scannerkit.core.platform import (
    PlatformInfo,
    clear_platform_cache,
    detect_architecture,
    detect_os,
    detect_platform,
)


class TestPlatformInfo:
    """Tests for PlatformInfo dataclass."""

    def test_platform_string(self):
        """Test platform string generation."""
        assert PlatformInfo("linux", "x64").platform_string() == "linux-x64"

    def test_str(self):
        assert str(PlatformInfo("macos", "aarch64")) == "macos-aarch64"


class TestDetectOs:
    """Tests for OS detection."""

    @patch("platform.system", return_value="Windows")
    def test_windows(self, mock_system):
        assert detect_os() == "windows"

    @patch("platform.system", return_value="Darwin")
    def test_macos(self, mock_system):
        assert detect_os() == "macos"

    @patch("distro.id", return_value="ubuntu")
    @patch("platform.system", return_value="Linux")
    def test_linux(self, mock_system, mock_distro):
        assert detect_os() == "linux"

    @patch("distro.id", return_value="alpine")
    @patch("platform.system", return_value="Linux")
    def test_alpine(self, mock_system, mock_distro):
        """Test musl-based Alpine is reported separately."""
        assert detect_os() == "alpine"

    @patch("platform.system", return_value="FreeBSD")
    def test_unknown(self, mock_system):
        """Test unknown systems detect as empty."""
        assert detect_os() == ""


class TestDetectArchitecture:
    """Tests for architecture detection."""

    @pytest.mark.parametrize("machine", ["x86_64", "AMD64", "x64"])
    def test_x64(self, machine):
        with patch("platform.machine", return_value=machine):
            assert detect_architecture() == "x64"

    @pytest.mark.parametrize("machine", ["aarch64", "arm64", "ARM64"])
    def test_aarch64(self, machine):
        with patch("platform.machine", return_value=machine):
            assert detect_architecture() == "aarch64"

    @pytest.mark.parametrize("machine", ["i686", "armv7l", "s390x", ""])
    def test_unsupported(self, machine):
        with patch("platform.machine", return_value=machine):
            assert detect_architecture() == ""


class TestDetectPlatform:
    """Tests for cached detection."""

    @patch("platform.machine", return_value="x86_64")
    @patch("platform.system", return_value="Windows")
    def test_detect_platform(self, mock_system, mock_machine):
        assert detect_platform() == PlatformInfo("windows", "x64")

    def test_result_is_cached(self):
        """Test detection runs once until the cache is cleared."""
        with patch("platform.system", return_value="Windows") as mock_system:
            first = detect_platform()
            second = detect_platform()
        assert first is second
        assert mock_system.call_count == 1

        clear_platform_cache()
        with patch("platform.system", return_value="Darwin"):
            assert detect_platform().os == "macos"
