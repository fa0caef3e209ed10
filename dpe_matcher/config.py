"""
Configuration management for dpe_matcher.

Uses pydantic-settings for type-safe configuration with automatic
environment variable loading and validation.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dpe_matcher.constants import (
    ADEME_BASE_URL,
    ADEME_DATASET,
    ADEME_PROXIMITY_DATASET,
    DEFAULT_USER_AGENT,
    DEFAULT_WORKERS,
    EXACT_MATCH_THRESHOLD,
    PROXIMITY_RESULT_SIZE,
    RECENCY_YEARS,
    REQUEST_TIMEOUT,
    STRATEGY_RESULT_SIZE,
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every value has a working default, so the matcher runs without a .env
    file. Variables are read with the DPE_ prefix (e.g. DPE_REQUEST_TIMEOUT).
    """

    model_config = SettingsConfigDict(
        env_prefix="DPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars
    )

    # ADEME API
    ademe_base_url: str = Field(
        default=ADEME_BASE_URL,
        description="Base URL of the ADEME data-fair datasets API",
    )
    ademe_dataset: str = Field(
        default=ADEME_DATASET,
        description="Dataset queried by the exactness classifier",
    )
    ademe_proximity_dataset: str = Field(
        default=ADEME_PROXIMITY_DATASET,
        description="Dataset queried by postal-code proximity search",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header sent to the ADEME API",
    )

    # Network
    request_timeout: float = Field(
        default=REQUEST_TIMEOUT,
        description="Per-request timeout in seconds",
    )
    max_workers: int = Field(
        default=DEFAULT_WORKERS,
        description="Thread pool size for concurrent search strategies",
    )

    # Sizing
    strategy_result_size: int = Field(
        default=STRATEGY_RESULT_SIZE,
        description="Maximum records fetched per search strategy",
    )
    proximity_result_size: int = Field(
        default=PROXIMITY_RESULT_SIZE,
        description="Maximum records fetched for one postal code",
    )

    # Scoring
    exact_match_threshold: int = Field(
        default=EXACT_MATCH_THRESHOLD,
        description="Minimum score (0-100) for a candidate to be an exact match",
    )
    recency_years: float = Field(
        default=RECENCY_YEARS,
        description="Certificates younger than this earn the recency bonus",
    )

    @field_validator("ademe_base_url", "ademe_dataset", "ademe_proximity_dataset", mode="before")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip whitespace (and trailing slashes) from string values."""
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @field_validator(
        "request_timeout",
        "max_workers",
        "strategy_result_size",
        "proximity_result_size",
        "recency_years",
    )
    @classmethod
    def must_be_positive(cls, v):
        """Reject zero or negative sizes and durations."""
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("exact_match_threshold")
    @classmethod
    def threshold_in_range(cls, v: int) -> int:
        """Threshold is a score, so it must lie in 0-100."""
        if not 0 <= v <= 100:
            raise ValueError("must be between 0 and 100")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


def get_exact_match_threshold() -> int:
    """Get exact match threshold from settings."""
    return get_settings().exact_match_threshold
