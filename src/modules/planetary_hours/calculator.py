"""
Planetary hour calculator.

Partitions sunrise->sunset into 12 solar hours and sunset->next sunrise
into 12 lunar hours, assigning each a ruler by walking the Chaldean
sequence from the day ruler. The lunar rotation continues from the ruler
after solar hour 12; it is never reset to the day's start index.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any

from .ephemeris import EphemerisWindow
from .rulers import (
    Ruler,
    Weekday,
    index_of,
    ruler_at,
    ruler_for_day,
    start_index_for_day,
    weekday_for,
)

HOURS_PER_HALF = 12


class HourHalf(str, Enum):
    """Which half of the planetary day a span belongs to."""

    SOLAR = "solar"
    LUNAR = "lunar"


@dataclass(frozen=True)
class GeoLocation:
    """Observer location in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")


@dataclass(frozen=True)
class HourSpan:
    """One planetary hour: [start, end) ruled by a single planet."""

    ordinal: int  # 1-12 within its half
    half: HourHalf
    start: datetime
    end: datetime
    ruler: Ruler

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, moment: datetime) -> bool:
        """Half-open containment test."""
        return self.start <= moment < self.end

    def to_dict(self) -> dict[str, Any]:
        return {
            "ordinal": self.ordinal,
            "half": self.half.value,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "ruler": self.ruler.value,
        }


@dataclass(frozen=True)
class PlanetaryHoursResult:
    """The 24 planetary hours of one civil date at one location."""

    civil_date: date
    day_of_week: Weekday
    day_ruler: Ruler
    location: GeoLocation
    solar_hours: tuple[HourSpan, ...]
    lunar_hours: tuple[HourSpan, ...]

    @property
    def hours(self) -> tuple[HourSpan, ...]:
        """All 24 spans in chronological order."""
        return self.solar_hours + self.lunar_hours

    @property
    def solar_hour_length(self) -> timedelta:
        return (self.solar_hours[-1].end - self.solar_hours[0].start) / HOURS_PER_HALF

    @property
    def lunar_hour_length(self) -> timedelta:
        return (self.lunar_hours[-1].end - self.lunar_hours[0].start) / HOURS_PER_HALF

    def current_hour(self, now: datetime) -> HourSpan | None:
        """Span containing now, or None when now falls outside the day."""
        for span in self.hours:
            if span.contains(now):
                return span
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.civil_date.isoformat(),
            "day_of_week": self.day_of_week.value,
            "day_ruler": self.day_ruler.value,
            "latitude": self.location.latitude,
            "longitude": self.location.longitude,
            "solar_hours": [s.to_dict() for s in self.solar_hours],
            "lunar_hours": [s.to_dict() for s in self.lunar_hours],
        }


def _boundary(opening: datetime, duration: timedelta, i: int) -> datetime:
    # Scale before dividing so the 12th boundary lands exactly on the close.
    return opening + duration * i / HOURS_PER_HALF


def partition(
    opening: datetime,
    closing: datetime,
    start_index: int,
    half: HourHalf,
) -> tuple[HourSpan, ...]:
    """Split [opening, closing) into 12 equal spans with rotating rulers.

    Each boundary is derived from the opening instant, never from the
    previous span's end. Boundaries are rounded to the nearest
    microsecond, so span lengths within a half may differ by up to one
    microsecond while the spans still tile the half exactly.
    """
    duration = closing - opening
    return tuple(
        HourSpan(
            ordinal=i + 1,
            half=half,
            start=_boundary(opening, duration, i),
            end=_boundary(opening, duration, i + 1),
            ruler=ruler_at(start_index + i),
        )
        for i in range(HOURS_PER_HALF)
    )


def compute(
    civil_date: date, location: GeoLocation, window: EphemerisWindow
) -> PlanetaryHoursResult:
    """Compute the planetary hours for a civil date.

    Args:
        civil_date: Date already normalised to the location's calendar
        location: Observer location
        window: Validated sunrise/sunset/next sunrise

    Returns:
        PlanetaryHoursResult with 12 solar and 12 lunar spans
    """
    day_of_week = weekday_for(civil_date)
    start_index = start_index_for_day(day_of_week)

    solar = partition(window.sunrise, window.sunset, start_index, HourHalf.SOLAR)

    lunar_start_index = index_of(solar[-1].ruler) + 1
    lunar = partition(window.sunset, window.next_sunrise, lunar_start_index, HourHalf.LUNAR)

    return PlanetaryHoursResult(
        civil_date=civil_date,
        day_of_week=day_of_week,
        day_ruler=ruler_for_day(day_of_week),
        location=location,
        solar_hours=solar,
        lunar_hours=lunar,
    )
