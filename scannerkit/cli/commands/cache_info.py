"""
Cache-info command implementation.

Shows the cache root and whether a given JRE is cached, without contacting
the server.
"""

import logging

from scannerkit.cli.utils import print_error, settings_from_args
from scannerkit.core.cache import CacheFailure, CacheHit, CacheMiss
from scannerkit.jre.downloader import JreDownloader
from scannerkit.jre.metadata import JreDescriptor

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the cache-info command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    settings = settings_from_args(args)
    downloader = JreDownloader(user_home=settings.user_home)
    print(f"Cache root: {downloader.cache_root}")

    entry = (args.sha256, args.filename, args.java_path)
    if not any(entry):
        return 0
    if not all(entry):
        print_error("--sha256, --filename and --java-path must be given together")
        return 1

    descriptor = JreDescriptor(
        filename=args.filename, sha256=args.sha256, java_path=args.java_path
    )
    result = downloader.is_jre_cached(descriptor)
    if isinstance(result, CacheHit):
        print(f"Cached: {result.path}")
        return 0
    elif isinstance(result, CacheMiss):
        print(f"Not cached: {downloader.extraction_path(descriptor)}")
        return 0
    elif isinstance(result, CacheFailure):
        print_error("Cache is not usable", result.message)
        return 1
    raise TypeError(f"Unexpected cache result: {result!r}")
