"""Server communication for scannerkit."""

from .client import SonarServer

__all__ = ["SonarServer"]
