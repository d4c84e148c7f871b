from __future__ import annotations

import pytest
from fastapi import HTTPException

from config.feature_flags import (
    FeatureFlags,
    get_feature_flags,
    is_feature_enabled,
    require_feature,
    reset_feature_flags,
)


def test_all_features_on_by_default(monkeypatch):
    for flag in FeatureFlags:
        monkeypatch.delenv(flag.value, raising=False)
    reset_feature_flags()

    flags = get_feature_flags()
    assert sorted(flags.enabled_features()) == sorted(f.value for f in FeatureFlags)


@pytest.mark.parametrize("value,expected", [("0", False), ("off", False), ("yes", True), ("TRUE", True)])
def test_env_values(monkeypatch, value, expected):
    monkeypatch.setenv("ENABLE_HOUR_ALERTS", value)
    reset_feature_flags()
    assert is_feature_enabled(FeatureFlags.ENABLE_HOUR_ALERTS) is expected
    assert is_feature_enabled("hour_alerts") is expected


def test_unknown_string_flag_is_off():
    assert is_feature_enabled("time_travel") is False


def test_state_is_cached_until_reset(monkeypatch):
    reset_feature_flags()
    assert get_feature_flags() is get_feature_flags()
    monkeypatch.setenv("ENABLE_RESULT_CACHE", "false")
    assert get_feature_flags().ENABLE_RESULT_CACHE is True
    reset_feature_flags()
    assert get_feature_flags().ENABLE_RESULT_CACHE is False


def test_require_feature_on_sync_callable(monkeypatch):
    @require_feature("result_cache")
    def work():
        return "done"

    assert work() == "done"
    monkeypatch.setenv("ENABLE_RESULT_CACHE", "0")
    reset_feature_flags()
    with pytest.raises(RuntimeError, match="Feature disabled"):
        work()


@pytest.mark.asyncio
async def test_require_feature_on_async_callable(monkeypatch):
    @require_feature(FeatureFlags.ENABLE_PLANETARY_HOURS)
    async def endpoint():
        return 42

    assert await endpoint() == 42
    monkeypatch.setenv("ENABLE_PLANETARY_HOURS", "false")
    reset_feature_flags()
    with pytest.raises(HTTPException) as exc:
        await endpoint()
    assert exc.value.status_code == 403
