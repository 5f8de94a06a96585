"""
scannerkit - Java runtime provisioning for Sonar scanners.

Downloads the JRE a SonarQube or SonarCloud server recommends, verifies it
and keeps it in a cache shared by every scanner on the machine.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("scannerkit")
except PackageNotFoundError:
    __version__ = "0.1.0"
