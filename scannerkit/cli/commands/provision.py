"""
Provision command implementation.

Resolves the JRE for this machine and prints the java executable path.
"""

import logging

from scannerkit.cli.utils import settings_from_args
from scannerkit.jre.resolver import JreResolver
from scannerkit.server.client import SonarServer

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the provision command.

    A failed provisioning is not an error: the scanner can still fall back
    to a java found on the PATH, so the exit code is 0 either way.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 unless the configuration is invalid)
    """
    settings = settings_from_args(args)
    logger.debug(f"Provisioning JRE for {settings.host_url} into {settings.user_home}")

    server = SonarServer(
        settings.host_url,
        token=settings.token,
        timeout=settings.http_timeout,
    )
    resolver = JreResolver(server, user_home=settings.user_home)
    java_path = resolver.resolve_path(settings)
    logger.debug(f"JRE provisioning outcome: {resolver.outcome.value}")

    if java_path is None:
        logger.info("No JRE was provisioned")
        return 0

    print(java_path)
    return 0
