"""
Unit tests for dpe_matcher.config module.
"""

import pytest
from pydantic import ValidationError

from dpe_matcher.config import Settings, get_exact_match_threshold, get_settings
from dpe_matcher.constants import EXACT_MATCH_THRESHOLD, STRATEGY_RESULT_SIZE


def test_defaults(settings):
    """Defaults work without any environment configuration."""
    assert settings.ademe_base_url.startswith("https://")
    assert settings.ademe_dataset == "dpe-v2-logements-existants"
    assert settings.strategy_result_size == STRATEGY_RESULT_SIZE
    assert settings.exact_match_threshold == EXACT_MATCH_THRESHOLD
    assert settings.request_timeout > 0


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_env_override(monkeypatch):
    monkeypatch.setenv("DPE_REQUEST_TIMEOUT", "2.5")
    monkeypatch.setenv("DPE_EXACT_MATCH_THRESHOLD", "85")
    get_settings.cache_clear()

    assert get_settings().request_timeout == 2.5
    assert get_exact_match_threshold() == 85


def test_base_url_trailing_slash_stripped():
    settings = Settings(_env_file=None, ademe_base_url=" https://example.org/datasets/ ")
    assert settings.ademe_base_url == "https://example.org/datasets"


@pytest.mark.parametrize(
    "field,value",
    [
        ("request_timeout", 0),
        ("max_workers", -1),
        ("strategy_result_size", 0),
        ("exact_match_threshold", 101),
    ],
)
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})
