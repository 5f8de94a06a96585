"""Test fixtures for scannerkit tests.

This package provides reusable pytest fixtures for testing scannerkit components.
Fixtures are organized by type:

- archives: JRE archive builders (zip, tar.gz) and descriptors
- directories: Sonar user home and cache layouts

Import fixtures in your tests using:
    from tests.fixtures.archives import jre_tar_gz
    from tests.fixtures.directories import sonar_user_home
"""

__all__ = [
    "archives",
    "directories",
]
