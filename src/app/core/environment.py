"""
Environment configuration.

Typed view over the environment variables that shape upstream access,
result caching and runtime mode.
"""

import os

from dataclasses import dataclass
from typing import Literal

EnvironmentType = Literal["development", "staging", "production", "test"]


@dataclass
class EphemerisConfig:
    """Upstream sunrise/sunset provider configuration."""

    source: str
    base_url: str
    timeout_seconds: float
    max_retries: int
    backoff_seconds: float


@dataclass
class CacheConfig:
    """In-process result cache configuration."""

    enabled: bool
    ttl_seconds: int
    max_entries: int


@dataclass
class EnvironmentConfig:
    """Complete environment configuration."""

    env_type: EnvironmentType
    ephemeris: EphemerisConfig
    cache: CacheConfig
    debug: bool


def get_environment() -> EnvironmentType:
    """Get current environment from ENVIRONMENT variable."""
    env = os.getenv("ENVIRONMENT", "development").lower()
    if env in ("development", "staging", "production", "test"):
        return env  # type: ignore[return-value]
    return "development"


def get_ephemeris_config() -> EphemerisConfig:
    """Get upstream ephemeris configuration."""
    from app.core.config import DEFAULT_EPHEMERIS_SOURCE, SUNRISE_API_URL

    return EphemerisConfig(
        source=DEFAULT_EPHEMERIS_SOURCE,
        base_url=SUNRISE_API_URL,
        timeout_seconds=float(os.getenv("EPHEMERIS_TIMEOUT_SECONDS", "10")),
        max_retries=int(os.getenv("EPHEMERIS_MAX_RETRIES", "2")),
        backoff_seconds=float(os.getenv("EPHEMERIS_BACKOFF_SECONDS", "0.5")),
    )


def get_cache_config() -> CacheConfig:
    """Get result cache configuration."""
    from config.feature_flags import get_feature_flags

    return CacheConfig(
        enabled=get_feature_flags().ENABLE_RESULT_CACHE,
        ttl_seconds=int(os.getenv("RESULT_CACHE_TTL_SECONDS", "86400")),
        max_entries=int(os.getenv("RESULT_CACHE_MAX_ENTRIES", "1024")),
    )


def get_complete_config() -> EnvironmentConfig:
    """Get complete environment configuration."""
    env = get_environment()

    return EnvironmentConfig(
        env_type=env,
        ephemeris=get_ephemeris_config(),
        cache=get_cache_config(),
        debug=env == "development",
    )
