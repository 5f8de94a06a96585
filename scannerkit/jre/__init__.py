"""
JRE provisioning for scannerkit.

Resolves, downloads and caches the Java runtime the scanner engine runs on.
"""

from .metadata import JreDescriptor, JreMetadata
from .downloader import JreDownloader
from .resolver import JreResolver, ProvisioningOutcome

__all__ = [
    "JreDescriptor",
    "JreMetadata",
    "JreDownloader",
    "JreResolver",
    "ProvisioningOutcome",
]
