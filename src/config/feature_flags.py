#!/usr/bin/env python3
"""
Feature flag utilities and decorators.

Provides a stable interface expected by services and routers:
- get_feature_flags() -> returns a state object with boolean flags and helpers
- require_feature(flag) -> decorator to gate endpoints/functions
- FeatureFlags -> enum-style names for router decorators

Supports both enum-based flags and the short string keys used by services
(e.g., "hour_alerts", "result_cache").
"""

from __future__ import annotations

import inspect
import os
from dataclasses import dataclass, field
from enum import Enum
from functools import wraps
from typing import Any, Callable


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "on"}


class FeatureFlags(Enum):
    ENABLE_PLANETARY_HOURS = "ENABLE_PLANETARY_HOURS"
    ENABLE_EPHEMERIS_FETCH = "ENABLE_EPHEMERIS_FETCH"
    ENABLE_HOUR_ALERTS = "ENABLE_HOUR_ALERTS"
    ENABLE_RESULT_CACHE = "ENABLE_RESULT_CACHE"


@dataclass
class FeatureFlagState:
    ENABLE_PLANETARY_HOURS: bool = field(
        default_factory=lambda: _env_bool("ENABLE_PLANETARY_HOURS", True)
    )
    # Upstream sunrise/sunset lookups; when off, callers must supply instants
    ENABLE_EPHEMERIS_FETCH: bool = field(
        default_factory=lambda: _env_bool("ENABLE_EPHEMERIS_FETCH", True)
    )
    ENABLE_HOUR_ALERTS: bool = field(
        default_factory=lambda: _env_bool("ENABLE_HOUR_ALERTS", True)
    )
    ENABLE_RESULT_CACHE: bool = field(
        default_factory=lambda: _env_bool("ENABLE_RESULT_CACHE", True)
    )

    def enabled_features(self) -> list[str]:
        """Return a list of feature names that are enabled."""
        return [name for name, value in self.to_dict().items() if value is True]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ENABLE_PLANETARY_HOURS": self.ENABLE_PLANETARY_HOURS,
            "ENABLE_EPHEMERIS_FETCH": self.ENABLE_EPHEMERIS_FETCH,
            "ENABLE_HOUR_ALERTS": self.ENABLE_HOUR_ALERTS,
            "ENABLE_RESULT_CACHE": self.ENABLE_RESULT_CACHE,
        }


# Module-level singleton
_FLAGS: FeatureFlagState | None = None


def get_feature_flags() -> FeatureFlagState:
    global _FLAGS
    if _FLAGS is None:
        _FLAGS = FeatureFlagState()
    return _FLAGS


def reset_feature_flags() -> None:
    """Drop the cached state so the next read re-evaluates the environment."""
    global _FLAGS
    _FLAGS = None


# Mapping for string-based require_feature usage
_STRING_FLAG_MAP: dict[str, str] = {
    "planetary_hours": "ENABLE_PLANETARY_HOURS",
    "ephemeris_fetch": "ENABLE_EPHEMERIS_FETCH",
    "hour_alerts": "ENABLE_HOUR_ALERTS",
    "result_cache": "ENABLE_RESULT_CACHE",
}


def is_feature_enabled(flag: FeatureFlags | str) -> bool:
    flags = get_feature_flags()

    if isinstance(flag, FeatureFlags):
        return getattr(flags, flag.value, False) is True

    attr = _STRING_FLAG_MAP.get(flag, None)
    if attr is None:
        # Unknown string flag: default to False to be safe
        return False
    return getattr(flags, attr, False) is True


def require_feature(flag: FeatureFlags | str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator to gate function/endpoint by feature flag.

    Works with both sync and async callables. Async callables (FastAPI
    endpoints) raise HTTPException 403 when disabled; plain functions
    raise RuntimeError.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                if not is_feature_enabled(flag):
                    from fastapi import HTTPException

                    raise HTTPException(status_code=403, detail="Feature disabled")
                return await func(*args, **kwargs)

            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            if not is_feature_enabled(flag):
                raise RuntimeError("Feature disabled")
            return func(*args, **kwargs)

        return sync_wrapper

    return decorator
