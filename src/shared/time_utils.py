#!/usr/bin/env python3
"""
Time utilities shared by the engine, services and API.

Provides UTC normalisation and caller-supplied timezone helpers. Nothing
here maps a location to a timezone; callers always name the zone.
"""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def is_aware(dt: datetime) -> bool:
    """True when dt carries a usable UTC offset."""
    return dt.tzinfo is not None and dt.tzinfo.utcoffset(dt) is not None


def ensure_utc(dt: datetime) -> datetime:
    """Ensure a datetime is timezone-aware and in UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def resolve_zone(name: str | None) -> tzinfo:
    """Resolve an IANA zone name; None means UTC.

    Raises:
        ValueError: If the zone name is unknown
    """
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e


def local_date(dt: datetime, zone: tzinfo) -> date:
    """Civil date of an instant in the given zone."""
    return ensure_utc(dt).astimezone(zone).date()
