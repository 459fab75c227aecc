"""Root test configuration."""

import logging

import pytest
import structlog

from crosstag.config.settings import get_settings
from crosstag.resources.store import InMemoryResourceStore


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; reset them around each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_resource(
    kind: str,
    name: str,
    group: str = "storage.gcp.upbound.io",
    version: str = "v1beta1",
    labels: dict | None = None,
    for_provider: dict | None = None,
    at_provider: dict | None = None,
) -> dict:
    """Build a managed resource object as the API server returns it."""
    obj: dict = {
        "apiVersion": f"{group}/{version}",
        "kind": kind,
        "metadata": {"name": name},
        "spec": {"forProvider": dict(for_provider or {})},
    }
    if labels is not None:
        obj["metadata"]["labels"] = dict(labels)
    if at_provider is not None:
        obj["status"] = {"atProvider": dict(at_provider)}
    return obj


@pytest.fixture
def resource_factory():
    """Factory for managed resource objects."""
    return make_resource


@pytest.fixture
def store():
    """Empty in-memory resource store."""
    return InMemoryResourceStore()
