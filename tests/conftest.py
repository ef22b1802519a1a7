"""Shared pytest configuration and fixtures for CMR-STAC tests."""

import os

import pytest

# The config singleton is built at import time, so the test environment has
# to be in place before anything under cmr_stac is imported.
TEST_ENV = {
    "CMR_URL": "https://cmr.earthdata.nasa.gov",
    "PROVIDER_REFRESH_INTERVAL": "0",
    "STAC_ROOT_PATH": "/stac",
    "CLOUD_STAC_ROOT_PATH": "/cloudstac",
    "STAC_VERSION": "1.0.0",
    "VALIDATE_RESPONSES": "true",
    "LOG_LEVEL": "INFO",
}
os.environ.update(TEST_ENV)
for name in ("CMR_INGEST_URL", "HOST", "PORT", "REQUEST_TIMEOUT"):
    os.environ.pop(name, None)

# Import HTTP mocking fixtures from fixtures module
pytest_plugins = ["tests.fixtures.mock_http"]


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests (fast, no external deps)")
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires services)"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers to tests based on their location."""
    for item in items:
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
