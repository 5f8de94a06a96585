"""
HTTP client for SonarQube and SonarCloud.

Implements the JreServer seam on top of requests:

- GET <host>/api/server/version            server version (SonarQube only)
- GET <api>/analysis/jres?os=...&arch=...  JRE metadata
- GET <api>/analysis/jres/<id>             JRE archive (SonarQube)
- GET <downloadUrl>                        JRE archive (SonarCloud)
"""

import logging
from typing import BinaryIO, Optional

import requests
from packaging.version import InvalidVersion, Version
from requests.exceptions import RequestException

from scannerkit.core.exceptions import ServerVersionError
from scannerkit.core.interfaces import JreServer
from scannerkit.jre.metadata import JreMetadata

logger = logging.getLogger(__name__)

SONARCLOUD_URL = "https://sonarcloud.io"
SONARCLOUD_API_URL = "https://api.sonarcloud.io"

# First SonarQube release with the analysis/jres endpoints
MIN_PROVISIONING_VERSION = Version("10.6")


class SonarServer(JreServer):
    """
    JRE server backed by a SonarQube or SonarCloud instance.

    Example:
        >>> server = SonarServer("https://sonarqube.example.com", token="squ_...")
        >>> if server.supports_jre_provisioning:
        ...     metadata = server.download_jre_metadata("linux", "x64")
    """

    def __init__(
        self,
        host_url: str,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        is_cloud: Optional[bool] = None,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize server client.

        Args:
            host_url: Server URL (e.g., https://sonarqube.example.com)
            token: Authentication token sent as a bearer token
            api_url: Web API v2 URL. Defaults to api.sonarcloud.io for
                SonarCloud and <host>/api/v2 otherwise.
            is_cloud: Force SonarCloud mode. If None, inferred from host_url.
            timeout: Request timeout in seconds
            session: requests session to use (default: a new session)
        """
        self.host_url = host_url.rstrip("/")
        self.token = token
        self.is_cloud = (
            is_cloud if is_cloud is not None else self.host_url == SONARCLOUD_URL
        )
        default_api = SONARCLOUD_API_URL if self.is_cloud else f"{self.host_url}/api/v2"
        self.api_url = (api_url or default_api).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self._supports_provisioning: Optional[bool] = None

    def _auth_headers(self) -> dict:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def server_version(self) -> Version:
        """
        Query the server version.

        Raises:
            ServerVersionError: If the request fails or the version is unparseable
        """
        url = f"{self.host_url}/api/server/version"
        try:
            response = self.session.get(
                url, headers=self._auth_headers(), timeout=self.timeout
            )
            response.raise_for_status()
            return Version(response.text.strip())
        except (RequestException, InvalidVersion) as e:
            raise ServerVersionError(f"Could not determine server version: {e}") from e

    @property
    def supports_jre_provisioning(self) -> bool:
        if self._supports_provisioning is None:
            self._supports_provisioning = self._query_provisioning_support()
        return self._supports_provisioning

    def _query_provisioning_support(self) -> bool:
        if self.is_cloud:
            return True
        try:
            version = self.server_version()
        except ServerVersionError as e:
            logger.debug(str(e))
            return False
        logger.debug(f"Server version: {version}")
        return version >= MIN_PROVISIONING_VERSION

    def download_jre_metadata(
        self, operating_system: str, architecture: str
    ) -> Optional[JreMetadata]:
        """
        Fetch metadata of the JRE the server offers for a platform.

        Args:
            operating_system: Server OS name (e.g., 'linux')
            architecture: Server architecture name (e.g., 'x64')

        Returns:
            First matching JreMetadata, or None if the request failed or the
            server offers no JRE for the platform
        """
        url = f"{self.api_url}/analysis/jres"
        headers = {"Accept": "application/json", **self._auth_headers()}
        params = {"os": operating_system, "arch": architecture}
        try:
            response = self.session.get(
                url, headers=headers, params=params, timeout=self.timeout
            )
            response.raise_for_status()
            entries = response.json()
        except (RequestException, ValueError) as e:
            logger.debug(f"Downloading JRE metadata from {url} failed: {e}")
            return None

        if not isinstance(entries, list) or not entries:
            logger.debug(
                f"The server offers no JRE for {operating_system}-{architecture}"
            )
            return None

        try:
            return JreMetadata.from_json(entries[0])
        except ValueError as e:
            logger.debug(f"Invalid JRE metadata: {e}")
            return None

    def download_jre(self, metadata: JreMetadata) -> Optional[BinaryIO]:
        """
        Open a stream over a JRE archive.

        Raises:
            requests.HTTPError: If the server answers with an error status
        """
        if self.is_cloud and metadata.download_url:
            url = metadata.download_url
            headers = {}
        else:
            url = f"{self.api_url}/analysis/jres/{metadata.id}"
            headers = {"Accept": "application/octet-stream", **self._auth_headers()}

        logger.debug(f"Downloading JRE from {url}")
        response = self.session.get(
            url, headers=headers, stream=True, timeout=self.timeout, allow_redirects=True
        )
        response.raise_for_status()
        # Let urllib3 undo any transfer compression
        response.raw.decode_content = True
        return response.raw


__all__ = [
    "SonarServer",
    "SONARCLOUD_URL",
    "SONARCLOUD_API_URL",
    "MIN_PROVISIONING_VERSION",
]
