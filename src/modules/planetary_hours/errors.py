"""
Planetary hours engine errors.

All engine failures derive from PlanetaryHoursError so callers can catch
the whole family at the API boundary. None of these are retried inside
the engine: identical inputs reproduce the identical error.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any


class PlanetaryHoursError(Exception):
    """Base class for planetary hours engine errors."""


class EphemerisViolation(str, Enum):
    """Which boundary condition an ephemeris window failed."""

    DAY_NOT_POSITIVE = "sunrise < sunset"
    NIGHT_NOT_POSITIVE = "sunset < next_sunrise"
    NAIVE_INSTANT = "instants must be timezone-aware"


class InvalidEphemerisError(PlanetaryHoursError):
    """Boundary instants are not in strict chronological order.

    Raised for degenerate days near the poles or when an upstream time
    source hands back inconsistent instants.
    """

    def __init__(
        self,
        violation: EphemerisViolation,
        *,
        sunrise: datetime | None = None,
        sunset: datetime | None = None,
        next_sunrise: datetime | None = None,
    ):
        self.violation = violation
        self.sunrise = sunrise
        self.sunset = sunset
        self.next_sunrise = next_sunrise
        super().__init__(f"Invalid ephemeris window: requires {violation.value}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "violation": self.violation.name,
            "condition": self.violation.value,
            "sunrise": self.sunrise.isoformat() if self.sunrise else None,
            "sunset": self.sunset.isoformat() if self.sunset else None,
            "next_sunrise": self.next_sunrise.isoformat() if self.next_sunrise else None,
        }


class InvalidDayNameError(PlanetaryHoursError, ValueError):
    """A day name outside the seven canonical weekdays (caller bug)."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid day name: {value!r}")


class UnknownRulerError(PlanetaryHoursError, ValueError):
    """A ruler outside the seven classical planets (caller bug)."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Unknown ruler: {value!r}")
