#!/usr/bin/env python3
"""
Planetary hours engine.

Pure, stateless computation of the 24 planetary hours of a civil date
from a validated sunrise/sunset/next-sunrise window.
"""

from .calculator import (
    GeoLocation,
    HourHalf,
    HourSpan,
    PlanetaryHoursResult,
    compute,
)
from .ephemeris import EphemerisWindow, validate
from .errors import (
    EphemerisViolation,
    InvalidDayNameError,
    InvalidEphemerisError,
    PlanetaryHoursError,
    UnknownRulerError,
)
from .rulers import (
    CHALDEAN_ORDER,
    DAY_RULERS,
    Ruler,
    Weekday,
    index_of,
    ruler_at,
    ruler_for_day,
    start_index_for_day,
    weekday_for,
)

__all__ = [
    "CHALDEAN_ORDER",
    "DAY_RULERS",
    "EphemerisViolation",
    "EphemerisWindow",
    "GeoLocation",
    "HourHalf",
    "HourSpan",
    "InvalidDayNameError",
    "InvalidEphemerisError",
    "PlanetaryHoursError",
    "PlanetaryHoursResult",
    "Ruler",
    "UnknownRulerError",
    "Weekday",
    "compute",
    "index_of",
    "ruler_at",
    "ruler_for_day",
    "start_index_for_day",
    "validate",
    "weekday_for",
]
