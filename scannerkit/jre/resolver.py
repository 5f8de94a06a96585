"""
JRE resolution policy.

Decides whether a JRE should be provisioned at all and, if so, drives the
downloader: fetch metadata, look in the cache, download on a miss. A failed
attempt is retried once from the metadata fetch onwards.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from scannerkit.config.settings import ScannerSettings
from scannerkit.core.cache import CacheFailure, CacheHit, CacheMiss
from scannerkit.core.interfaces import JreServer
from scannerkit.jre.downloader import JreDownloader
from scannerkit.jre.metadata import JreMetadata

logger = logging.getLogger(__name__)

PROVISIONING_INFO = (
    "The JRE provisioning is a time consuming operation.\n"
    "JRE provisioned: {filename}.\n"
    "If you already have a compatible Java version installed, please add either "
    'the parameter "/d:sonar.scanner.skipJreProvisioning=true" or '
    '"/d:sonar.scanner.javaExePath=<PATH>".'
)


class ProvisioningOutcome(Enum):
    """How the last resolve_path call ended."""

    USER_SUPPLIED = "user_supplied"  # sonar.scanner.javaExePath set
    DISABLED = "disabled"  # sonar.scanner.skipJreProvisioning set
    UNSUPPORTED = "unsupported"  # Server or platform cannot provision
    CACHE_HIT = "cache_hit"
    DOWNLOADED = "downloaded"
    FAILED = "failed"


class JreResolver:
    """
    Resolves the java executable to run the scanner engine with.

    Example:
        >>> resolver = JreResolver(SonarServer("https://sonarqube.example.com"))
        >>> java = resolver.resolve_path(load_settings())
        >>> if java is None:
        ...     print("Falling back to the java on PATH")
    """

    def __init__(
        self,
        server: JreServer,
        downloader: Optional[JreDownloader] = None,
        user_home: Optional[Path] = None,
    ):
        """
        Initialize resolver.

        Args:
            server: Source of JRE metadata and archives
            downloader: Cache front-end. If None, one is created for user_home.
            user_home: Sonar user home used when no downloader is given
        """
        self.server = server
        self.downloader = downloader or JreDownloader(user_home=user_home)
        self.outcome: Optional[ProvisioningOutcome] = None

    def resolve_path(self, settings: ScannerSettings) -> Optional[str]:
        """
        Resolve the path of a provisioned java executable.

        Args:
            settings: Scanner settings

        Returns:
            Path of the java executable, or None when provisioning is skipped
            or failed twice

        The way the call ended is left in self.outcome.
        """
        logger.debug("JreResolver: Resolving JRE path.")
        self.outcome = self._skip_reason(settings)
        if self.outcome is not None:
            return None

        result = self._resolve(settings)
        if result is None:
            logger.debug("JreResolver: Resolving JRE path. Retrying...")
            result = self._resolve(settings)
        if result is None:
            self.outcome = ProvisioningOutcome.FAILED
        return result

    def _skip_reason(self, settings: ScannerSettings) -> Optional[ProvisioningOutcome]:
        # Order matters: only the first reason to skip is logged
        if settings.java_exe_path:
            logger.debug(
                "JreResolver: sonar.scanner.javaExePath is set, skipping JRE provisioning."
            )
            return ProvisioningOutcome.USER_SUPPLIED
        if settings.skip_jre_provisioning:
            logger.debug(
                "JreResolver: sonar.scanner.skipJreProvisioning is set, skipping JRE provisioning."
            )
            return ProvisioningOutcome.DISABLED
        if not self.server.supports_jre_provisioning:
            logger.debug(
                "JreResolver: Skipping Java runtime environment provisioning because "
                "this version of SonarQube does not support it."
            )
            return ProvisioningOutcome.UNSUPPORTED
        if not settings.operating_system:
            logger.debug(
                "JreResolver: sonar.scanner.os is not set or detected, skipping JRE provisioning."
            )
            return ProvisioningOutcome.UNSUPPORTED
        if not settings.architecture:
            logger.debug(
                "JreResolver: sonar.scanner.arch is not set or detected, skipping JRE provisioning."
            )
            return ProvisioningOutcome.UNSUPPORTED
        return None

    def _resolve(self, settings: ScannerSettings) -> Optional[str]:
        metadata = self._fetch_metadata(settings)
        if metadata is None:
            logger.debug("JreResolver: Metadata could not be retrieved.")
            return None

        descriptor = metadata.to_descriptor()
        result = self.downloader.is_jre_cached(descriptor)
        if isinstance(result, CacheHit):
            logger.debug(f"JreResolver: Cache hit '{result.path}'.")
            self.outcome = ProvisioningOutcome.CACHE_HIT
            return str(result.path)
        elif isinstance(result, CacheMiss):
            return self._download(metadata)
        elif isinstance(result, CacheFailure):
            logger.debug(f"JreResolver: Cache failure. {result.message}")
            return None
        raise TypeError(f"Unexpected cache result: {result!r}")

    def _fetch_metadata(self, settings: ScannerSettings) -> Optional[JreMetadata]:
        try:
            return self.server.download_jre_metadata(
                settings.operating_system, settings.architecture
            )
        except Exception as e:
            logger.debug(f"JreResolver: Metadata request failed with '{e}'.")
            return None

    def _download(self, metadata: JreMetadata) -> Optional[str]:
        logger.info(PROVISIONING_INFO.format(filename=metadata.filename))
        result = self.downloader.download_jre(
            metadata.to_descriptor(), lambda: self.server.download_jre(metadata)
        )
        if isinstance(result, CacheHit):
            logger.debug(
                f"JreResolver: Download success. JRE can be found at '{result.path}'."
            )
            self.outcome = ProvisioningOutcome.DOWNLOADED
            return str(result.path)
        elif isinstance(result, CacheFailure):
            logger.debug(f"JreResolver: Download failure. {result.message}")
            return None
        raise TypeError(f"Unexpected download result: {result!r}")


__all__ = [
    "JreResolver",
    "ProvisioningOutcome",
    "PROVISIONING_INFO",
]
