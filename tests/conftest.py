"""
Pytest configuration and shared fixtures for scannerkit tests.
"""

import io
import pytest

# Import test fixtures to make them available to all tests
# These imports register the fixtures with pytest's fixture discovery system
# ruff: noqa: F401
from tests.fixtures.archives import (
    jre_tar_gz,
    jre_zip,
    jre_metadata,
)
from tests.fixtures.directories import (
    sonar_user_home,
    isolated_sonar_home,
)

from scannerkit.core.platform import clear_platform_cache


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def fresh_platform_detection():
    """Make every test see its own platform detection."""
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture
def stream_of():
    """Factory for download sources that hand out fresh streams over bytes."""

    def factory(data: bytes):
        return lambda: io.BytesIO(data)

    return factory


@pytest.fixture
def no_network(monkeypatch):
    """Disable network access for tests."""
    import socket

    def guard(*args, **kwargs):
        raise RuntimeError("Network access not allowed in this test")

    monkeypatch.setattr(socket, "socket", guard)
