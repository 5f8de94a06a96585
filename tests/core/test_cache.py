"""
Unit tests for the content-addressable file cache.

Tests archive acquisition: reuse of verified files, fresh downloads,
checksum gating, temp file cleanup and concurrent completion.
"""

import io
from unittest.mock import Mock, patch

import pytest

from scannerkit.core.cache import (
    DownloadError,
    DownloadSuccess,
    FileCache,
    FileDescriptor,
)
from scannerkit.core.exceptions import CacheError, ChecksumError
from scannerkit.core.filesystem import FileSystem
from tests.fixtures.archives import sha256_of

CONTENT = b"archive bytes"
CHECKSUM_MISMATCH = "The checksum of the downloaded file does not match the expected checksum."


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def descriptor():
    return FileDescriptor(filename="jre.tar.gz", sha256=sha256_of(CONTENT))


@pytest.fixture
def cache(sonar_user_home):
    return FileCache(sonar_user_home)


@pytest.fixture
def shard(cache, descriptor):
    return cache.ensure_shard(descriptor)


def shard_entries(shard):
    return sorted(p.name for p in shard.iterdir())


# ============================================================================
# Layout
# ============================================================================


class TestLayout:
    """Test cache paths."""

    def test_cache_root(self, cache, sonar_user_home):
        assert cache.cache_root == sonar_user_home / "cache"

    def test_shard_is_named_after_checksum(self, cache, descriptor, sonar_user_home):
        assert cache.shard_path(descriptor) == (
            sonar_user_home / "cache" / descriptor.sha256
        )

    def test_shard_name_ignores_checksum_case(self, cache, descriptor):
        """Test checksums differing only in case share one shard."""
        upper = FileDescriptor(descriptor.filename, descriptor.sha256.upper())

        assert cache.shard_path(upper) == cache.shard_path(descriptor)
        assert cache.shard_path(upper).name == descriptor.sha256

    def test_ensure_shard_creates_root_and_shard(self, cache, descriptor):
        shard = cache.ensure_shard(descriptor)
        assert shard.is_dir()
        assert cache.cache_root.is_dir()

    def test_ensure_shard_is_idempotent(self, cache, descriptor):
        assert cache.ensure_shard(descriptor) == cache.ensure_shard(descriptor)

    def test_ensure_shard_failure(self, sonar_user_home, descriptor):
        """Test directory creation failures surface as CacheError."""
        fs = Mock(spec=FileSystem)
        fs.directory_exists.return_value = False
        fs.create_directory.side_effect = OSError("read-only filesystem")

        with pytest.raises(CacheError, match="could not be created"):
            FileCache(sonar_user_home, fs=fs).ensure_shard(descriptor)


# ============================================================================
# ensure_file
# ============================================================================


class TestEnsureFileDownload:
    """Test fresh downloads."""

    def test_download_success(self, cache, descriptor, shard, stream_of):
        """Test a verified download is published under its file name."""
        result = cache.ensure_file(descriptor, stream_of(CONTENT))

        assert result == DownloadSuccess(shard / "jre.tar.gz")
        assert (shard / "jre.tar.gz").read_bytes() == CONTENT
        assert shard_entries(shard) == ["jre.tar.gz"]

    def test_uppercase_checksum_accepted(self, cache, stream_of):
        """Test expected checksums are compared case-insensitively."""
        descriptor = FileDescriptor("jre.tar.gz", sha256_of(CONTENT).upper())
        shard = cache.ensure_shard(descriptor)

        result = cache.ensure_file(descriptor, stream_of(CONTENT))

        assert result == DownloadSuccess(shard / "jre.tar.gz")

    def test_checksum_error_message(self):
        assert str(ChecksumError()) == CHECKSUM_MISMATCH

    def test_checksum_mismatch_publishes_nothing(self, cache, descriptor, shard, stream_of):
        """Test corrupt downloads never reach the final name."""
        result = cache.ensure_file(descriptor, stream_of(b"corrupted"))

        assert result == DownloadError(
            "The download of the file from the server failed with the exception "
            f"'{CHECKSUM_MISMATCH}'."
        )
        assert shard_entries(shard) == []

    def test_null_stream(self, cache, descriptor, shard):
        """Test a download source returning None."""
        result = cache.ensure_file(descriptor, lambda: None)

        assert result == DownloadError(
            "The download of the file from the server failed with the exception "
            "'The download stream is null. The server likely returned an error status code.'."
        )
        assert shard_entries(shard) == []

    def test_download_exception(self, cache, descriptor, shard):
        """Test exceptions from the download source are reported, temp removed."""
        download = Mock(side_effect=IOError("Reason"))

        result = cache.ensure_file(descriptor, download)

        assert result == DownloadError(
            "The download of the file from the server failed with the exception 'Reason'."
        )
        assert shard_entries(shard) == []
        download.assert_called_once()

    def test_stream_is_closed(self, cache, descriptor, shard):
        """Test the download stream is closed after copying."""
        stream = io.BytesIO(CONTENT)

        cache.ensure_file(descriptor, lambda: stream)

        assert stream.closed

    def test_failed_move_removes_temp(self, cache, descriptor, shard, stream_of):
        """Test a failing publish leaves no temp file behind."""
        with patch.object(cache.fs, "move", side_effect=OSError("rename failed")):
            result = cache.ensure_file(descriptor, stream_of(CONTENT))

        assert isinstance(result, DownloadError)
        assert "rename failed" in result.message
        assert shard_entries(shard) == []


class TestEnsureFileExisting:
    """Test reuse of files already in the shard."""

    def test_valid_file_is_reused(self, cache, descriptor, shard):
        """Test no download happens for a verified file."""
        (shard / "jre.tar.gz").write_bytes(CONTENT)
        download = Mock()

        result = cache.ensure_file(descriptor, download)

        assert result == DownloadSuccess(shard / "jre.tar.gz")
        download.assert_not_called()

    def test_corrupt_file_is_replaced(self, cache, descriptor, shard, stream_of):
        """Test a mismatching file is deleted and downloaded again."""
        (shard / "jre.tar.gz").write_bytes(b"truncated")

        result = cache.ensure_file(descriptor, stream_of(CONTENT))

        assert result == DownloadSuccess(shard / "jre.tar.gz")
        assert (shard / "jre.tar.gz").read_bytes() == CONTENT

    def test_logs_checksums(self, cache, descriptor, shard, caplog):
        """Test both checksums are traced."""
        (shard / "jre.tar.gz").write_bytes(CONTENT)

        with caplog.at_level("DEBUG", logger="scannerkit.core.cache"):
            cache.ensure_file(descriptor, Mock())

        assert (
            f"The checksum of the downloaded file is '{descriptor.sha256}' "
            f"and the expected checksum is '{descriptor.sha256}'."
        ) in caplog.messages

    def test_checksum_failure_counts_as_mismatch(self, sonar_user_home, descriptor, stream_of):
        """Test an exception while hashing is treated as a mismatch."""
        checksum = Mock()
        checksum.compute_hash.side_effect = IOError("disk error")
        cache = FileCache(sonar_user_home, checksum=checksum)
        shard = cache.ensure_shard(descriptor)

        result = cache.ensure_file(descriptor, stream_of(CONTENT))

        assert isinstance(result, DownloadError)
        assert shard_entries(shard) == []


class TestConcurrentDownload:
    """Test recovery when another process publishes the same file."""

    def test_file_published_by_another_process(self, cache, descriptor, shard):
        """Test a failed download falls back to a file that appeared meanwhile."""

        def download():
            (shard / "jre.tar.gz").write_bytes(CONTENT)
            raise IOError("connection reset")

        result = cache.ensure_file(descriptor, download)

        assert result == DownloadSuccess(shard / "jre.tar.gz")

    def test_invalid_file_published_by_another_process(self, cache, descriptor, shard):
        """Test the parallel file is verified like any other."""

        def download():
            (shard / "jre.tar.gz").write_bytes(b"partial")
            raise IOError("connection reset")

        result = cache.ensure_file(descriptor, download)

        assert result == DownloadError(CHECKSUM_MISMATCH)
        assert shard_entries(shard) == []
