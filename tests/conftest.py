"""
Pytest configuration and shared fixtures for dpe_matcher tests.
"""

import logging
from datetime import UTC, datetime

import pytest

from dpe_matcher.config import Settings, get_settings
from dpe_matcher.domain.models import PropertyDescriptor

# Fixed reference time for recency scoring
FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _reset_package_state():
    """Clear cached settings and undo CLI logging setup between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    for name in ("dpe_matcher", "dpe_classify", "dpe_nearby"):
        pkg_logger = logging.getLogger(name)
        for handler in pkg_logger.handlers:
            if not isinstance(handler, logging.NullHandler):
                handler.close()
        pkg_logger.handlers = [h for h in pkg_logger.handlers if isinstance(h, logging.NullHandler)]
        pkg_logger.propagate = True
        pkg_logger.setLevel(logging.NOTSET)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def settings() -> Settings:
    """Settings independent of any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def paris_descriptor() -> PropertyDescriptor:
    return PropertyDescriptor(department="75", commune="Paris", section="AB", numero="001")
