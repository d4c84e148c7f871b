from __future__ import annotations

from datetime import date

import pytest

from app.services.cache_service import CacheKey, ResultCache
from modules.planetary_hours import GeoLocation


@pytest.mark.asyncio
async def test_get_set_and_stats():
    cache = ResultCache(ttl_seconds=60, max_entries=4)
    assert await cache.get("a") is None
    await cache.set("a", 1)
    assert await cache.get("a") == 1

    stats = cache.get_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["writes"] == 1
    assert stats["size"] == 1
    assert stats["hit_rate"] == pytest.approx(0.5)


@pytest.mark.asyncio
async def test_entries_expire():
    cache = ResultCache(ttl_seconds=3600)
    await cache.set("k", "v")
    await cache.set("gone", "v", ttl=0)

    assert await cache.get("gone") is None
    assert await cache.get("k") == "v"
    assert cache.get_stats()["evictions"] == 1

    await cache.set("a", 1, ttl=0)
    await cache.set("b", 2, ttl=0)
    assert await cache.cleanup_expired() == 2
    assert cache.get_stats()["size"] == 1


@pytest.mark.asyncio
async def test_oldest_entry_evicted_at_capacity():
    cache = ResultCache(max_entries=2)
    await cache.set("a", 1)
    await cache.set("b", 2)
    await cache.set("c", 3)

    assert await cache.get("a") is None
    assert await cache.get("c") == 3
    assert cache.get_stats()["evictions"] == 1
    assert await cache.clear() == 2


def test_cache_key_ignores_sub_metre_jitter(sunday_window):
    d = date(2024, 1, 7)
    a = CacheKey.planetary_hours(d, GeoLocation(51.476912, -0.000512), sunday_window)
    b = CacheKey.planetary_hours(d, GeoLocation(51.476899, -0.000498), sunday_window)
    c = CacheKey.planetary_hours(d, GeoLocation(48.8566, 2.3522), sunday_window)

    assert a == b
    assert a != c
    assert a.startswith("planetary_hours:2024-01-07:")


@pytest.mark.asyncio
async def test_zero_capacity_stores_nothing():
    cache = ResultCache(max_entries=0)
    await cache.set("a", 1)
    assert await cache.get("a") is None
    stats = cache.get_stats()
    assert stats["writes"] == 0
    assert stats["size"] == 0
