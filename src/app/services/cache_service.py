#!/usr/bin/env python3
"""
In-process cache for computed planetary hours.

compute() is a pure function of (date, location, window), so results can
be memoised without correctness risk. Entries live in memory only and are
never written to disk.
"""

import asyncio
import logging
import time

from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from typing import Any

from app.core.config import CACHE_COORD_PLACES
from app.utils.hash_keys import cache_key_hash
from modules.planetary_hours import EphemerisWindow, GeoLocation

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: Any
    expires_at: float


class ResultCache:
    """
    Async-safe TTL cache with bounded size

    Features:
    - TTL-based expiration (monotonic clock)
    - Oldest entry evicted once max_entries is reached
    - Hit/miss/write/eviction statistics
    """

    def __init__(self, ttl_seconds: int = 86400, max_entries: int = 1024):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._lock = asyncio.Lock()
        self._stats = {"hits": 0, "misses": 0, "writes": 0, "evictions": 0}

    async def get(self, key: str) -> Any | None:
        """
        Get value from cache

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found/expired
        """
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats["misses"] += 1
                return None

            if time.monotonic() >= entry.expires_at:
                del self._entries[key]
                self._stats["evictions"] += 1
                self._stats["misses"] += 1
                return None

            self._stats["hits"] += 1
            return entry.value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """
        Set value in cache

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds (defaults to the cache TTL)

        A cache with max_entries <= 0 stores nothing.
        """
        if self.max_entries <= 0:
            return
        ttl = self.ttl_seconds if ttl is None else ttl
        async with self._lock:
            self._entries.pop(key, None)
            while len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self._stats["evictions"] += 1
                logger.debug(f"Evicted cache entry {evicted}")
            self._entries[key] = _Entry(value=value, expires_at=time.monotonic() + ttl)
            self._stats["writes"] += 1

    async def clear(self) -> int:
        """
        Clear all cache entries

        Returns:
            Number of entries cleared
        """
        async with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._stats["evictions"] += count
            return count

    async def cleanup_expired(self) -> int:
        """
        Remove expired cache entries

        Returns:
            Number of entries removed
        """
        async with self._lock:
            now = time.monotonic()
            expired = [k for k, e in self._entries.items() if now >= e.expires_at]
            for key in expired:
                del self._entries[key]
            self._stats["evictions"] += len(expired)
            return len(expired)

    def get_stats(self) -> dict:
        """Get cache statistics"""
        total = self._stats["hits"] + self._stats["misses"]
        hit_rate = self._stats["hits"] / total if total > 0 else 0.0

        return {
            **self._stats,
            "hit_rate": hit_rate,
            "total_requests": total,
            "size": len(self._entries),
        }


class CacheKey:
    """Helper class for generating consistent cache keys"""

    @staticmethod
    def planetary_hours(
        civil_date: date, location: GeoLocation, window: EphemerisWindow
    ) -> str:
        """Key for a computed day: date, rounded location and window instants"""
        lat = round(location.latitude, CACHE_COORD_PLACES)
        lon = round(location.longitude, CACHE_COORD_PLACES)
        raw = ":".join(
            (
                civil_date.isoformat(),
                f"{lat:.{CACHE_COORD_PLACES}f}",
                f"{lon:.{CACHE_COORD_PLACES}f}",
                window.sunrise.isoformat(),
                window.sunset.isoformat(),
                window.next_sunrise.isoformat(),
            )
        )
        return f"planetary_hours:{civil_date.isoformat()}:{cache_key_hash(raw)}"
