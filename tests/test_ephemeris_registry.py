from __future__ import annotations

import pytest

from app.core.environment import EphemerisConfig
from interfaces.ephemeris_source import (
    EphemerisSourceRegistry,
    EphemerisSourceUnavailableError,
    get_registry,
)
from interfaces.initialize import initialize_sources, shutdown_sources


class NotASource:
    id = "broken"


def test_register_and_lookup(ephemeris_source):
    registry = EphemerisSourceRegistry(default_source="fake")
    assert registry.register(ephemeris_source) is True
    assert registry.get("fake") is ephemeris_source
    assert registry.get_or_default() is ephemeris_source
    assert registry.get_or_default("fake") is ephemeris_source
    assert registry.list_sources() == ["fake"]


def test_duplicate_requires_force(ephemeris_source):
    registry = EphemerisSourceRegistry()
    registry.register(ephemeris_source)
    with pytest.raises(ValueError, match="already registered"):
        registry.register(ephemeris_source)
    assert registry.register(ephemeris_source, force=True) is True


def test_rejects_objects_missing_the_protocol():
    with pytest.raises(TypeError):
        EphemerisSourceRegistry().register(NotASource())


def test_missing_default_and_unknown_ids(ephemeris_source):
    registry = EphemerisSourceRegistry(default_source="sunrise_sunset_org")
    with pytest.raises(EphemerisSourceUnavailableError) as exc:
        registry.get_or_default()
    assert exc.value.source_id == "sunrise_sunset_org"

    registry.register(ephemeris_source)
    with pytest.raises(ValueError, match="'other' not registered"):
        registry.get_or_default("other")
    with pytest.raises(ValueError):
        registry.set_default("other")

    registry.set_default("fake")
    assert registry.get_or_default() is ephemeris_source


def test_unregister_and_clear(ephemeris_source):
    registry = EphemerisSourceRegistry()
    registry.register(ephemeris_source)
    assert registry.unregister("fake") is True
    assert registry.unregister("fake") is False
    registry.register(ephemeris_source)
    registry.clear()
    assert registry.list_sources() == []


@pytest.mark.asyncio
async def test_startup_registers_sunrise_sunset_org():
    registry = get_registry()
    try:
        results = initialize_sources()
        assert results == {"sunrise_sunset_org": True}
        assert "sunrise_sunset_org" in registry.list_sources()
        # Nothing was fetched, so there is no client to close yet
        await shutdown_sources()
    finally:
        registry.unregister("sunrise_sunset_org")


def _config(source: str) -> EphemerisConfig:
    return EphemerisConfig(
        source=source,
        base_url="https://api.sunrise-sunset.org/json",
        timeout_seconds=1.0,
        max_retries=0,
        backoff_seconds=0.0,
    )


def test_startup_selects_configured_default(monkeypatch, fake_source):
    registry = get_registry()
    monkeypatch.setattr(registry, "_default_source", registry.default_source)
    monkeypatch.setattr("interfaces.initialize.get_ephemeris_config", lambda: _config("fake"))
    try:
        initialize_sources()
        assert registry.default_source == "fake"
        assert registry.get_or_default() is fake_source
        assert registry.get("sunrise_sunset_org").config.max_retries == 0
    finally:
        registry.unregister("sunrise_sunset_org")


def test_startup_keeps_default_when_configured_source_is_unknown(monkeypatch):
    registry = get_registry()
    monkeypatch.setattr(registry, "_default_source", registry.default_source)
    monkeypatch.setattr("interfaces.initialize.get_ephemeris_config", lambda: _config("nowhere"))
    try:
        initialize_sources()
        assert registry.default_source == "sunrise_sunset_org"
    finally:
        registry.unregister("sunrise_sunset_org")
