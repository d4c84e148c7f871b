"""
Ephemeris window validation.

Turns three externally supplied instants into an ordered window. This is
a boundary check only; no sunrise or sunset is computed here.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from shared.time_utils import ensure_utc, is_aware

from .errors import EphemerisViolation, InvalidEphemerisError


@dataclass(frozen=True)
class EphemerisWindow:
    """Sunrise, sunset and next sunrise for one civil date at one place.

    Instants are UTC. Invariant: sunrise < sunset < next_sunrise.
    """

    sunrise: datetime
    sunset: datetime
    next_sunrise: datetime

    @property
    def day_length(self) -> timedelta:
        return self.sunset - self.sunrise

    @property
    def night_length(self) -> timedelta:
        return self.next_sunrise - self.sunset

    def to_dict(self) -> dict[str, str]:
        return {
            "sunrise": self.sunrise.isoformat(),
            "sunset": self.sunset.isoformat(),
            "next_sunrise": self.next_sunrise.isoformat(),
        }


def validate(
    sunrise: datetime, sunset: datetime, next_sunrise: datetime
) -> EphemerisWindow:
    """Validate boundary instants into an EphemerisWindow.

    Args:
        sunrise: Sunrise of the civil date
        sunset: Sunset of the civil date
        next_sunrise: Sunrise of the following date

    Returns:
        EphemerisWindow with UTC instants

    Raises:
        InvalidEphemerisError: If an instant is naive, the day has no
            positive length, or the night does not follow the day
    """
    if not all(is_aware(dt) for dt in (sunrise, sunset, next_sunrise)):
        raise InvalidEphemerisError(
            EphemerisViolation.NAIVE_INSTANT,
            sunrise=sunrise,
            sunset=sunset,
            next_sunrise=next_sunrise,
        )

    sunrise = ensure_utc(sunrise)
    sunset = ensure_utc(sunset)
    next_sunrise = ensure_utc(next_sunrise)

    if not sunrise < sunset:
        raise InvalidEphemerisError(
            EphemerisViolation.DAY_NOT_POSITIVE,
            sunrise=sunrise,
            sunset=sunset,
            next_sunrise=next_sunrise,
        )
    if not sunset < next_sunrise:
        raise InvalidEphemerisError(
            EphemerisViolation.NIGHT_NOT_POSITIVE,
            sunrise=sunrise,
            sunset=sunset,
            next_sunrise=next_sunrise,
        )

    return EphemerisWindow(sunrise=sunrise, sunset=sunset, next_sunrise=next_sunrise)
