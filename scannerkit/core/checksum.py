"""
Checksum computation for cached artifacts.

Provides incremental hashing over binary streams. Hash text is always
lowercase hex; comparisons go through checksums_match() and ignore case.
"""

import hashlib
from typing import BinaryIO

from scannerkit.core.interfaces import Checksum

CHUNK_SIZE = 8192


class StreamingHasher:
    """Compute hash incrementally for streamed content."""

    def __init__(self, algorithm: str = "sha256"):
        """
        Initialize streaming hasher.

        Args:
            algorithm: Hash algorithm (only 'sha256' is supported)

        Raises:
            ValueError: If algorithm is not supported
        """
        self.algorithm = algorithm.lower()

        if self.algorithm == "sha256":
            self.hasher = hashlib.sha256()
        else:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    def update(self, data: bytes):
        """Add data to hash computation."""
        self.hasher.update(data)

    def update_from_stream(self, stream: BinaryIO):
        """Feed everything left in stream to the hash."""
        while chunk := stream.read(CHUNK_SIZE):
            self.update(chunk)

    def finalize(self) -> str:
        """Get final hash value as hex string."""
        return self.hasher.hexdigest()

    def verify(self, expected_hash: str) -> bool:
        """
        Check if computed hash matches expected value.

        Args:
            expected_hash: Expected hash value (hex string)

        Returns:
            True if hashes match, False otherwise
        """
        return checksums_match(self.finalize(), expected_hash)


def checksums_match(actual: str, expected: str) -> bool:
    """Case-insensitive comparison of two hex digests."""
    if actual is None or expected is None:
        return False
    return actual.strip().lower() == expected.strip().lower()


class ChecksumSha256(Checksum):
    """SHA-256 implementation of the Checksum interface."""

    instance: "ChecksumSha256"

    def compute_hash(self, stream: BinaryIO) -> str:
        hasher = StreamingHasher("sha256")
        hasher.update_from_stream(stream)
        return hasher.finalize()


ChecksumSha256.instance = ChecksumSha256()


__all__ = [
    "StreamingHasher",
    "ChecksumSha256",
    "checksums_match",
]
