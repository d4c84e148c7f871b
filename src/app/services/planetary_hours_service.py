#!/usr/bin/env python3
"""
Planetary hours service

Glue between the pure engine, the ephemeris source registry and the
result cache. Instants either come from the caller (validated as given)
or are fetched from a registered source.
"""

import time

from datetime import date, datetime, timedelta, tzinfo

from api.services.metrics import metrics_collector
from app.core.environment import CacheConfig, get_cache_config
from app.core.logging import get_engine_logger
from app.services.cache_service import CacheKey, ResultCache
from config.feature_flags import get_feature_flags
from interfaces.ephemeris_source import (
    EphemerisSourceError,
    EphemerisSourceRegistry,
    EphemerisSourceUnavailableError,
    get_registry,
)
from modules.planetary_hours import (
    EphemerisWindow,
    GeoLocation,
    HourSpan,
    InvalidEphemerisError,
    PlanetaryHoursResult,
    compute,
    validate,
)
from shared.time_utils import ensure_utc, local_date

logger = get_engine_logger("planetary_hours_service")


class EphemerisFetchDisabledError(RuntimeError):
    """Instants were not supplied and upstream lookups are switched off."""

    def __init__(self):
        super().__init__("Ephemeris fetch disabled; supply sunrise, sunset and next_sunrise")


class PlanetaryHoursService:
    """Service for computing planetary hours for a date and location."""

    def __init__(
        self,
        registry: EphemerisSourceRegistry | None = None,
        cache: ResultCache | None = None,
        cache_config: CacheConfig | None = None,
    ):
        self.flags = get_feature_flags()
        self.registry = registry or get_registry()
        self.cache_config = cache_config or get_cache_config()
        self.cache = cache or ResultCache(
            ttl_seconds=self.cache_config.ttl_seconds,
            max_entries=self.cache_config.max_entries,
        )

    async def resolve_window(
        self,
        civil_date: date,
        location: GeoLocation,
        *,
        sunrise: datetime | None = None,
        sunset: datetime | None = None,
        next_sunrise: datetime | None = None,
        source_id: str | None = None,
    ) -> EphemerisWindow:
        """
        Validate caller instants, or fetch them when none are given

        Raises:
            ValueError: Only some of the three instants were supplied, or
                source_id names an unregistered source
            EphemerisFetchDisabledError: Fetch needed but switched off
            EphemerisSourceUnavailableError: No default source is registered
            EphemerisSourceError: Upstream failure
            InvalidEphemerisError: Instants are not strictly ordered
        """
        supplied = [v is not None for v in (sunrise, sunset, next_sunrise)]
        if all(supplied):
            return validate(sunrise, sunset, next_sunrise)
        if any(supplied):
            raise ValueError(
                "sunrise, sunset and next_sunrise must be supplied together"
            )

        if not self.flags.ENABLE_EPHEMERIS_FETCH:
            raise EphemerisFetchDisabledError()

        source = self.registry.get_or_default(source_id)
        return await source.fetch_window(civil_date, location)

    async def calculate(
        self,
        civil_date: date,
        location: GeoLocation,
        *,
        sunrise: datetime | None = None,
        sunset: datetime | None = None,
        next_sunrise: datetime | None = None,
        source_id: str | None = None,
    ) -> PlanetaryHoursResult:
        """
        Compute the 24 planetary hours for civil_date at location

        Args:
            civil_date: Civil date in the location's calendar
            location: Observer location
            sunrise: Optional sunrise of civil_date
            sunset: Optional sunset of civil_date
            next_sunrise: Optional sunrise of the following date
            source_id: Ephemeris source used when instants are omitted

        Returns:
            PlanetaryHoursResult
        """
        try:
            window = await self.resolve_window(
                civil_date,
                location,
                sunrise=sunrise,
                sunset=sunset,
                next_sunrise=next_sunrise,
                source_id=source_id,
            )
        except InvalidEphemerisError as e:
            metrics_collector.record_compute("invalid_ephemeris")
            logger.warning(
                f"Rejected ephemeris window for {civil_date.isoformat()}: {e.violation.name}"
            )
            raise
        except EphemerisSourceUnavailableError as e:
            metrics_collector.record_compute("source_unavailable")
            logger.error(f"No ephemeris source for {civil_date.isoformat()}: {e}")
            raise
        except EphemerisSourceError as e:
            metrics_collector.record_compute("upstream_error")
            logger.error(f"Ephemeris source failed for {civil_date.isoformat()}: {e}")
            raise

        use_cache = self.cache_config.enabled
        cache_key = CacheKey.planetary_hours(civil_date, location, window)
        if use_cache:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                metrics_collector.record_cache_event("hit")
                return cached
            metrics_collector.record_cache_event("miss")

        start = time.perf_counter()
        result = compute(civil_date, location, window)
        duration = time.perf_counter() - start
        metrics_collector.record_compute("success", duration)

        logger.info(
            f"Computed planetary hours for {civil_date.isoformat()} "
            f"({result.day_of_week.value}, ruler {result.day_ruler.value}) "
            f"in {duration * 1000:.3f}ms"
        )

        if use_cache:
            await self.cache.set(cache_key, result)
            metrics_collector.record_cache_event("write")

        return result

    async def current_hour(
        self,
        location: GeoLocation,
        at: datetime,
        tz: tzinfo,
        *,
        source_id: str | None = None,
    ) -> tuple[PlanetaryHoursResult, HourSpan | None]:
        """
        Find the planetary hour in force at an instant

        The local civil date of `at` in tz selects the day. Before that day's
        sunrise the previous date's night hours apply; past its last lunar
        hour the following date applies.

        Returns:
            (result, span); span is None only if no day covers `at`
        """
        at = ensure_utc(at)
        civil_date = local_date(at, tz)

        result = await self.calculate(civil_date, location, source_id=source_id)
        if at < result.solar_hours[0].start:
            result = await self.calculate(
                civil_date - timedelta(days=1), location, source_id=source_id
            )
        elif at >= result.lunar_hours[-1].end:
            result = await self.calculate(
                civil_date + timedelta(days=1), location, source_id=source_id
            )

        return result, result.current_hour(at)

    def get_status(self) -> dict:
        return {
            "sources": self.registry.list_sources(),
            "cache": self.cache.get_stats(),
            "flags": self.flags.to_dict(),
        }


# Singleton instance
_planetary_hours_service = None


def get_planetary_hours_service() -> PlanetaryHoursService:
    """Get singleton planetary hours service instance."""
    global _planetary_hours_service
    if _planetary_hours_service is None:
        _planetary_hours_service = PlanetaryHoursService()
    return _planetary_hours_service


def reset_planetary_hours_service() -> None:
    global _planetary_hours_service
    _planetary_hours_service = None
