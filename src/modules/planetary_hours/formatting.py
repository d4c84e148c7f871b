"""
Display formatting for planetary hours.

A single TimeFormatPolicy is applied uniformly to all 24 spans; the
engine itself never formats instants.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any

from .calculator import HourSpan, PlanetaryHoursResult


@dataclass(frozen=True)
class TimeFormatPolicy:
    """How instants are rendered for display."""

    hour12: bool = False
    seconds: bool = True
    tz: tzinfo | None = None

    @property
    def pattern(self) -> str:
        if self.hour12:
            return "%I:%M:%S %p" if self.seconds else "%I:%M %p"
        return "%H:%M:%S" if self.seconds else "%H:%M"

    def with_zone(self, tz: tzinfo | None) -> TimeFormatPolicy:
        return TimeFormatPolicy(hour12=self.hour12, seconds=self.seconds, tz=tz)

    def format(self, instant: datetime) -> str:
        if self.tz is not None:
            instant = instant.astimezone(self.tz)
        return instant.strftime(self.pattern)


CLOCK_24H = TimeFormatPolicy(hour12=False, seconds=True)
CLOCK_12H = TimeFormatPolicy(hour12=True, seconds=False)


def ordinal_label(n: int) -> str:
    """1 -> '1st', 2 -> '2nd', 11 -> '11th', 22 -> '22nd'."""
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def span_label(span: HourSpan) -> str:
    return f"{ordinal_label(span.ordinal)} {span.half.value.capitalize()} Hour"


def format_span(
    span: HourSpan, policy: TimeFormatPolicy, now: datetime | None = None
) -> dict[str, Any]:
    return {
        "label": span_label(span),
        "ordinal": span.ordinal,
        "half": span.half.value,
        "start": span.start.isoformat(),
        "end": span.end.isoformat(),
        "start_display": policy.format(span.start),
        "end_display": policy.format(span.end),
        "ruler": span.ruler.value,
        "is_current": bool(now is not None and span.contains(now)),
    }


def format_result(
    result: PlanetaryHoursResult,
    policy: TimeFormatPolicy = CLOCK_24H,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Render a result as display rows.

    Args:
        result: Computed planetary hours
        policy: Time format applied to every span
        now: Optional moment used to flag the current hour

    Returns:
        Dictionary with general info plus solar and lunar rows
    """
    return {
        "general": {
            "date": result.civil_date.isoformat(),
            "day_of_week": result.day_of_week.value,
            "planetary_ruler": result.day_ruler.value,
            "latitude": result.location.latitude,
            "longitude": result.location.longitude,
        },
        "solar_hours": [format_span(s, policy, now) for s in result.solar_hours],
        "lunar_hours": [format_span(s, policy, now) for s in result.lunar_hours],
    }
