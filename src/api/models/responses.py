"""
Response models for OpenAPI specification and contract stability.

Every route declares a response model for:
- SDK generation
- Contract stability
- Type safety
"""

from datetime import date as civil_date, datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# =======================
# Health & Monitoring
# =======================

class HealthStatus(BaseModel):
    """Basic health status response."""
    status: str = Field(..., description="Health status: ok, warning, error")
    timestamp: datetime = Field(..., description="Check timestamp")
    process_id: str = Field(..., description="Process ID as string")


class DependencyCheck(BaseModel):
    """Individual dependency check result."""
    status: str = Field(..., description="Check status: ok, warning, error")
    error: Optional[str] = Field(None, description="Error message if failed")


class EngineCheck(DependencyCheck):
    """Planetary hours engine self-test."""
    compute_time_ms: Optional[float] = Field(None, description="Self-test computation time")
    first_hour_ruler: Optional[str] = Field(None, description="Ruler of solar hour 1 in the self-test")


class EphemerisSourcesCheck(DependencyCheck):
    """Ephemeris source registry check."""
    registered_count: int = Field(..., description="Number of registered sources")
    sources: List[str] = Field(..., description="Registered source ids")
    fetch_enabled: bool = Field(..., description="Upstream lookups are switched on")


class ResultCacheCheck(DependencyCheck):
    """In-process result cache check."""
    enabled: bool = Field(..., description="Result cache is switched on")
    size: int = Field(0, description="Entries currently held")
    hit_rate: float = Field(0.0, description="Hit rate since startup")


class HealthSummary(BaseModel):
    """Health check summary statistics."""
    total_checks: int = Field(..., description="Total number of checks")
    passing: int = Field(..., description="Number of passing checks")
    warnings: int = Field(..., description="Number of warnings")
    failures: int = Field(..., description="Number of failures")


class ReadinessResponse(BaseModel):
    """Readiness probe response."""
    status: str = Field(..., description="Overall status: ready or not_ready")
    timestamp: datetime = Field(..., description="Check timestamp")
    checks: Dict[str, Union[EphemerisSourcesCheck, ResultCacheCheck, EngineCheck, DependencyCheck]] = Field(
        ..., description="Individual dependency checks"
    )
    summary: HealthSummary = Field(..., description="Check summary")
    errors: Optional[List[str]] = Field(None, description="Critical error messages")
    warnings: Optional[List[str]] = Field(None, description="Warning messages")


class VersionResponse(BaseModel):
    """Version and environment information."""
    api_version: str = Field(..., description="API version")
    python_version: str = Field(..., description="Python interpreter version")
    environment: str = Field(..., description="Deployment environment")
    features: List[str] = Field(..., description="Enabled feature flags")
    timestamp: datetime = Field(..., description="Response timestamp")


# =======================
# Error Responses
# =======================

# RFC 7807 Problem Details (global error model)
class Problem(BaseModel):
    """Problem Details per RFC 7807 for error responses."""
    type: Optional[str] = Field(
        None, description="URI reference that identifies the problem type"
    )
    title: str = Field(..., description="Short, human-readable summary of the problem")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(
        None, description="URI reference that identifies the specific occurrence"
    )
    code: Optional[str] = Field(None, description="Application-specific error code")
    errors: Optional[Dict[str, Any]] = Field(
        None, description="Structured details, e.g. the violated ephemeris condition"
    )


# =======================
# Planetary Hours
# =======================

class HourSpanModel(BaseModel):
    """One planetary hour, formatted for display."""
    model_config = ConfigDict(json_schema_extra={
        "example": {
            "label": "1st Solar Hour",
            "ordinal": 1,
            "half": "solar",
            "start": "2024-01-07T06:00:00+00:00",
            "end": "2024-01-07T07:00:00+00:00",
            "start_display": "06:00:00",
            "end_display": "07:00:00",
            "ruler": "Sun",
            "is_current": False,
        }
    })

    label: str = Field(..., description="Display label, e.g. '3rd Lunar Hour'")
    ordinal: int = Field(..., ge=1, le=12, description="Position within its half")
    half: str = Field(..., description="solar (day) or lunar (night)")
    start: datetime = Field(..., description="Inclusive start instant (UTC)")
    end: datetime = Field(..., description="Exclusive end instant (UTC)")
    start_display: str = Field(..., description="Start formatted per the requested clock")
    end_display: str = Field(..., description="End formatted per the requested clock")
    ruler: str = Field(..., description="Ruling planet")
    is_current: bool = Field(False, description="Span contains the reference instant")


class GeneralInfo(BaseModel):
    """Day-level information."""
    date: civil_date = Field(..., description="Civil date")
    day_of_week: str = Field(..., description="Weekday name")
    planetary_ruler: str = Field(..., description="Ruler of the weekday")
    latitude: float = Field(..., description="Latitude in decimal degrees")
    longitude: float = Field(..., description="Longitude in decimal degrees")
    location_source: str = Field(..., description="request or default")
    timezone: str = Field(..., description="Zone used for display times")


class EphemerisWindowModel(BaseModel):
    """Boundary instants the hours were derived from."""
    sunrise: datetime = Field(..., description="Sunrise of the civil date (UTC)")
    sunset: datetime = Field(..., description="Sunset of the civil date (UTC)")
    next_sunrise: datetime = Field(..., description="Sunrise of the following date (UTC)")


class PlanetaryHoursResponse(BaseModel):
    """All 24 planetary hours of a day."""
    general: GeneralInfo = Field(..., description="Day-level information")
    window: EphemerisWindowModel = Field(..., description="Sunrise/sunset window")
    solar_hours: List[HourSpanModel] = Field(..., description="12 day hours")
    lunar_hours: List[HourSpanModel] = Field(..., description="12 night hours")
    current_hour: Optional[HourSpanModel] = Field(None, description="Hour containing the reference instant")
    meta: Dict[str, Any] = Field(default_factory=dict, description="Response metadata")


class CurrentHourResponse(BaseModel):
    """Planetary hour in force at an instant."""
    at: datetime = Field(..., description="Reference instant")
    general: GeneralInfo = Field(..., description="Planetary day the instant falls in")
    current_hour: Optional[HourSpanModel] = Field(None, description="Hour containing the instant")
    next_hour: Optional[HourSpanModel] = Field(None, description="Following hour within the same planetary day")


class HourAlertModel(BaseModel):
    """A planned hour alert."""
    alert_id: str = Field(..., description="Stable alert identifier")
    title: str = Field(..., description="Notification title")
    body: str = Field(..., description="Notification body")
    fire_at: datetime = Field(..., description="When the alert is due (hour start)")
    ruler: str = Field(..., description="Ruler of the hour")
    half: str = Field(..., description="solar or lunar")
    ordinal: int = Field(..., description="Position within its half")


class AlertsResponse(BaseModel):
    """Result of (re)scheduling hour alerts."""
    date: civil_date = Field(..., description="Civil date the alerts belong to")
    scheduled: int = Field(..., description="Number of alerts scheduled")
    alerts: List[HourAlertModel] = Field(..., description="Scheduled alerts in firing order")


# =======================
# Reference Data
# =======================

class RulerInfo(BaseModel):
    """A planet in the Chaldean sequence."""
    index: int = Field(..., ge=0, le=6, description="Position in the Chaldean order")
    name: str = Field(..., description="Planet name")


class DayRulerInfo(BaseModel):
    """A weekday and its ruling planet."""
    day: str = Field(..., description="Weekday name")
    ruler: str = Field(..., description="Ruling planet")
    start_index: int = Field(..., description="Chaldean index of solar hour 1")


class ReferenceResponse(BaseModel):
    """Reference list envelope."""
    data: List[Any] = Field(..., description="Reference entries")
    count: int = Field(..., description="Number of entries")


# =======================
# Service Info
# =======================

class ServiceInfoResponse(BaseModel):
    """Root endpoint response."""
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    status: str = Field(..., description="Service status")
    docs: str = Field(..., description="Interactive documentation path")
    endpoints: Dict[str, str] = Field(..., description="Primary endpoints")
