#!/usr/bin/env python3
"""
Pluggable ephemeris sources for the planetary hours service
Provides the source protocol and a registry for routing lookups
"""

from .ephemeris_source import (
    EphemerisSource,
    EphemerisSourceError,
    EphemerisSourceRegistry,
    EphemerisSourceUnavailableError,
    ephemeris_registry,
    get_registry,
)

__all__ = [
    "EphemerisSource",
    "EphemerisSourceError",
    "EphemerisSourceRegistry",
    "EphemerisSourceUnavailableError",
    "ephemeris_registry",
    "get_registry",
]
