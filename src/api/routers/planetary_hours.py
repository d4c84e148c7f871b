#!/usr/bin/env python3
"""
Planetary Hours API Router

Endpoints for computing the 24 planetary hours of a day, looking up the
hour in force at an instant and planning hour alerts.
"""

from datetime import UTC, date as civil_date, datetime
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field, field_validator, model_validator

from api.models.responses import (
    AlertsResponse,
    CurrentHourResponse,
    EphemerisWindowModel,
    GeneralInfo,
    HourAlertModel,
    HourSpanModel,
    PlanetaryHoursResponse,
)
from app.core.config import (
    DEFAULT_DISPLAY_SECONDS,
    DEFAULT_LATITUDE,
    DEFAULT_LONGITUDE,
    DEFAULT_TIME_FORMAT,
)
from app.core.logging import get_api_logger
from app.openapi.common import DEFAULT_ERROR_RESPONSES
from app.services.notification_service import (
    get_notification_scheduler,
    schedule_hour_alerts,
)
from app.services.planetary_hours_service import get_planetary_hours_service
from config.feature_flags import FeatureFlags, require_feature
from modules.planetary_hours import (
    GeoLocation,
    HourSpan,
    PlanetaryHoursError,
    PlanetaryHoursResult,
)
from modules.planetary_hours.formatting import TimeFormatPolicy, format_span
from shared.time_utils import ensure_utc, resolve_zone

router = APIRouter(
    prefix="/api/v1/planetary-hours",
    tags=["planetary-hours"],
    responses=DEFAULT_ERROR_RESPONSES,
)

logger = get_api_logger("planetary_hours")

TimeFormat = Literal["24h", "12h"]


# Request Models
class PlanetaryHoursRequest(BaseModel):
    """Request for a day's planetary hours."""
    date: civil_date = Field(..., description="Civil date (YYYY-MM-DD) in the location's calendar")
    latitude: Optional[float] = Field(None, ge=-90, le=90, description="Latitude in decimal degrees; omit with longitude to use the default location")
    longitude: Optional[float] = Field(None, ge=-180, le=180, description="Longitude in decimal degrees")
    sunrise: Optional[datetime] = Field(None, description="Sunrise of the date (RFC3339 with offset)")
    sunset: Optional[datetime] = Field(None, description="Sunset of the date (RFC3339 with offset)")
    next_sunrise: Optional[datetime] = Field(None, description="Sunrise of the following date (RFC3339 with offset)")
    source: Optional[str] = Field(None, description="Ephemeris source id used when instants are omitted")
    timezone: Optional[str] = Field(None, description="IANA timezone for display times (default UTC)")
    time_format: TimeFormat = Field(default=DEFAULT_TIME_FORMAT, description="24h or 12h clock")
    seconds: bool = Field(default=DEFAULT_DISPLAY_SECONDS, description="Include seconds in display times")
    at: Optional[datetime] = Field(None, description="Reference instant for current-hour highlighting (default now)")

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, v):
        if v is not None:
            resolve_zone(v)
        return v

    @model_validator(mode="after")
    def coordinates_paired(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be supplied together")
        return self


class AlertsRequest(PlanetaryHoursRequest):
    """Request to (re)schedule alerts for the upcoming hours of a day."""


# Helpers
def _location(latitude: Optional[float], longitude: Optional[float]) -> tuple[GeoLocation, str]:
    if latitude is None or longitude is None:
        return GeoLocation(DEFAULT_LATITUDE, DEFAULT_LONGITUDE), "default"
    return GeoLocation(latitude, longitude), "request"


def _policy(time_format: str, seconds: bool, timezone: Optional[str]) -> TimeFormatPolicy:
    return TimeFormatPolicy(
        hour12=time_format == "12h",
        seconds=seconds,
        tz=resolve_zone(timezone),
    )


def _span_model(span: HourSpan, policy: TimeFormatPolicy, now: Optional[datetime]) -> HourSpanModel:
    return HourSpanModel(**format_span(span, policy, now))


def _general(result: PlanetaryHoursResult, location_source: str, timezone: Optional[str]) -> GeneralInfo:
    return GeneralInfo(
        date=result.civil_date,
        day_of_week=result.day_of_week.value,
        planetary_ruler=result.day_ruler.value,
        latitude=result.location.latitude,
        longitude=result.location.longitude,
        location_source=location_source,
        timezone=timezone or "UTC",
    )


async def _calculate(request: PlanetaryHoursRequest, location: GeoLocation) -> PlanetaryHoursResult:
    service = get_planetary_hours_service()
    try:
        return await service.calculate(
            request.date,
            location,
            sunrise=request.sunrise,
            sunset=request.sunset,
            next_sunrise=request.next_sunrise,
            source_id=request.source,
        )
    except PlanetaryHoursError:
        raise
    except ValueError as e:
        # Partial instants or an unknown source id
        raise HTTPException(status_code=422, detail=str(e))


# Endpoints
@router.post(
    "",
    response_model=PlanetaryHoursResponse,
    summary="Calculate Planetary Hours",
    operation_id="planetary_hours_calculate",
)
@require_feature(FeatureFlags.ENABLE_PLANETARY_HOURS)
async def calculate_planetary_hours(request: PlanetaryHoursRequest) -> PlanetaryHoursResponse:
    """
    Calculate the 24 planetary hours of a civil date.

    Supply sunrise, sunset and next_sunrise to compute from known instants,
    or omit all three to fetch them from an ephemeris source. Day hours
    start from the weekday's ruler; night hours continue the Chaldean
    sequence from the ruler of the 12th day hour.
    """
    location, location_source = _location(request.latitude, request.longitude)
    result = await _calculate(request, location)

    policy = _policy(request.time_format, request.seconds, request.timezone)
    now = ensure_utc(request.at) if request.at else datetime.now(UTC)
    current = result.current_hour(now)

    logger.info(
        f"Planetary hours for {result.civil_date.isoformat()} "
        f"({result.day_of_week.value}, source={location_source})"
    )

    return PlanetaryHoursResponse(
        general=_general(result, location_source, request.timezone),
        window=EphemerisWindowModel(
            sunrise=result.solar_hours[0].start,
            sunset=result.solar_hours[-1].end,
            next_sunrise=result.lunar_hours[-1].end,
        ),
        solar_hours=[_span_model(s, policy, now) for s in result.solar_hours],
        lunar_hours=[_span_model(s, policy, now) for s in result.lunar_hours],
        current_hour=_span_model(current, policy, now) if current else None,
        meta={
            "instants": "request" if request.sunrise is not None else "fetched",
            "solar_hour_seconds": result.solar_hour_length.total_seconds(),
            "lunar_hour_seconds": result.lunar_hour_length.total_seconds(),
        },
    )


@router.get(
    "/current",
    response_model=CurrentHourResponse,
    summary="Current Planetary Hour",
    operation_id="planetary_hours_current",
)
@require_feature(FeatureFlags.ENABLE_PLANETARY_HOURS)
async def get_current_hour(
    lat: float = Query(..., ge=-90, le=90, description="Latitude in decimal degrees"),
    lon: float = Query(..., ge=-180, le=180, description="Longitude in decimal degrees"),
    at: Optional[datetime] = Query(None, description="Instant to look up (default now)"),
    tz: Optional[str] = Query(None, description="IANA timezone of the location's calendar (default UTC)"),
    source: Optional[str] = Query(None, description="Ephemeris source id"),
    time_format: TimeFormat = Query(DEFAULT_TIME_FORMAT, description="24h or 12h clock"),
) -> CurrentHourResponse:
    """
    Find the planetary hour in force at an instant.

    Instants before local sunrise belong to the previous date's night
    hours. Always fetches sunrise and sunset from an ephemeris source.
    """
    try:
        zone = resolve_zone(tz)
        location = GeoLocation(lat, lon)
        moment = ensure_utc(at) if at else datetime.now(UTC)
        result, span = await get_planetary_hours_service().current_hour(
            location, moment, zone, source_id=source
        )
    except PlanetaryHoursError:
        raise
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    policy = _policy(time_format, DEFAULT_DISPLAY_SECONDS, tz)
    next_span = None
    if span is not None:
        hours = result.hours
        position = hours.index(span)
        if position + 1 < len(hours):
            next_span = hours[position + 1]

    return CurrentHourResponse(
        at=moment,
        general=_general(result, "request", tz),
        current_hour=_span_model(span, policy, moment) if span else None,
        next_hour=_span_model(next_span, policy, moment) if next_span else None,
    )


@router.post(
    "/alerts",
    response_model=AlertsResponse,
    summary="Schedule Hour Alerts",
    operation_id="planetary_hours_alerts",
)
@require_feature(FeatureFlags.ENABLE_HOUR_ALERTS)
async def schedule_alerts(request: AlertsRequest) -> AlertsResponse:
    """
    Replace scheduled alerts with one per upcoming hour of the day.

    Hours that have already started (relative to `at`, default now) are
    skipped. Previously scheduled alerts are cancelled first.
    """
    location, _ = _location(request.latitude, request.longitude)
    result = await _calculate(request, location)

    policy = _policy(request.time_format, request.seconds, request.timezone)
    now = ensure_utc(request.at) if request.at else datetime.now(UTC)

    scheduler = get_notification_scheduler()
    scheduled = await schedule_hour_alerts(scheduler, result, now, policy)
    pending = await scheduler.pending()

    return AlertsResponse(
        date=result.civil_date,
        scheduled=scheduled,
        alerts=[HourAlertModel(**alert.to_dict()) for alert in pending],
    )
