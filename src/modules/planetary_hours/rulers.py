"""
Chaldean ruler sequence and weekday rulership.

The seven classical planets in Chaldean order drive every planetary hour
rotation. Indices into the sequence are always taken modulo 7.
"""

from __future__ import annotations

from datetime import date
from enum import Enum

from .errors import InvalidDayNameError, UnknownRulerError


class Ruler(str, Enum):
    """Classical planetary rulers."""

    SATURN = "Saturn"
    JUPITER = "Jupiter"
    MARS = "Mars"
    SUN = "Sun"
    VENUS = "Venus"
    MERCURY = "Mercury"
    MOON = "Moon"

    def __str__(self) -> str:
        return self.value


class Weekday(str, Enum):
    """Canonical civil weekday names."""

    SUNDAY = "Sunday"
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"

    def __str__(self) -> str:
        return self.value


CHALDEAN_ORDER: tuple[Ruler, ...] = (
    Ruler.SATURN,
    Ruler.JUPITER,
    Ruler.MARS,
    Ruler.SUN,
    Ruler.VENUS,
    Ruler.MERCURY,
    Ruler.MOON,
)

DAY_RULERS: dict[Weekday, Ruler] = {
    Weekday.SUNDAY: Ruler.SUN,
    Weekday.MONDAY: Ruler.MOON,
    Weekday.TUESDAY: Ruler.MARS,
    Weekday.WEDNESDAY: Ruler.MERCURY,
    Weekday.THURSDAY: Ruler.JUPITER,
    Weekday.FRIDAY: Ruler.VENUS,
    Weekday.SATURDAY: Ruler.SATURN,
}

# date.weekday(): Monday == 0
_ISO_WEEKDAYS: tuple[Weekday, ...] = (
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
    Weekday.SUNDAY,
)

_RULER_INDEX: dict[Ruler, int] = {ruler: i for i, ruler in enumerate(CHALDEAN_ORDER)}


def ruler_at(index: int) -> Ruler:
    """Ruler at any integer position of the cyclic Chaldean sequence."""
    return CHALDEAN_ORDER[index % len(CHALDEAN_ORDER)]


def _coerce_ruler(ruler: Ruler | str) -> Ruler:
    if isinstance(ruler, Ruler):
        return ruler
    if isinstance(ruler, str):
        for member in Ruler:
            if member.value.lower() == ruler.strip().lower():
                return member
    raise UnknownRulerError(ruler)


def index_of(ruler: Ruler | str) -> int:
    """Position of a ruler in the Chaldean sequence (0-6).

    Raises:
        UnknownRulerError: If ruler is not one of the seven classical planets
    """
    return _RULER_INDEX[_coerce_ruler(ruler)]


def _coerce_weekday(day: Weekday | str) -> Weekday:
    if isinstance(day, Weekday):
        return day
    if isinstance(day, str):
        for member in Weekday:
            if member.value.lower() == day.strip().lower():
                return member
    raise InvalidDayNameError(day)


def ruler_for_day(day: Weekday | str) -> Ruler:
    """Planet governing a weekday.

    Raises:
        InvalidDayNameError: If day is not a canonical weekday name
    """
    return DAY_RULERS[_coerce_weekday(day)]


def start_index_for_day(day: Weekday | str) -> int:
    """Index at which the solar-hour rotation begins for a weekday."""
    return index_of(ruler_for_day(day))


def weekday_for(civil_date: date) -> Weekday:
    """Civil weekday of a date already normalised to the local calendar."""
    return _ISO_WEEKDAYS[civil_date.weekday()]
