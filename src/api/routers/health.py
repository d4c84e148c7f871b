#!/usr/bin/env python3
"""
Health check endpoints for monitoring and readiness
"""

import os
import sys
import time

from datetime import UTC, date, datetime, timedelta

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, PlainTextResponse

from api.models.responses import (
    DependencyCheck,
    EngineCheck,
    EphemerisSourcesCheck,
    HealthStatus,
    HealthSummary,
    ReadinessResponse,
    ResultCacheCheck,
    VersionResponse,
)
from app.core.config import SERVICE_VERSION

router = APIRouter(tags=["health"])

# Fixed self-test day: Sunday 2024-01-07, 06:00-18:00 UTC, next sunrise 06:00
_SELF_TEST_DATE = date(2024, 1, 7)


@router.get(
    "/health/live",
    response_model=HealthStatus,
    summary="Liveness",
    operation_id="health_live",
)
async def liveness_check() -> HealthStatus:
    """
    Kubernetes liveness probe endpoint.

    Returns 200 OK if the application process is alive and responsive.
    This should only fail if the process is completely dead.
    """
    return HealthStatus(
        status="ok",
        timestamp=datetime.now(UTC),
        process_id=str(os.getpid()),
    )


@router.get(
    "/health/up",
    response_class=PlainTextResponse,
    summary="Up",
    operation_id="health_up",
)
async def health_up() -> PlainTextResponse:
    """Ultra‑simple plaintext liveness for external monitors.

    Always returns HTTP 200 with body "ok" when the process is responsive.
    """
    return PlainTextResponse("ok")


async def _check_core_dependencies() -> dict[str, DependencyCheck]:
    """Check core system dependencies for readiness."""
    checks = {}

    # 1. Engine self-test on a fixed Sunday
    try:
        from modules.planetary_hours import GeoLocation, Ruler, compute, validate

        start = datetime(2024, 1, 7, 6, 0, tzinfo=UTC)
        window = validate(start, start + timedelta(hours=12), start + timedelta(hours=24))
        t0 = time.perf_counter()
        result = compute(_SELF_TEST_DATE, GeoLocation(0.0, 0.0), window)
        elapsed_ms = (time.perf_counter() - t0) * 1000

        first = result.solar_hours[0].ruler
        checks["engine"] = EngineCheck(
            status="ok" if first is Ruler.SUN else "error",
            error=None if first is Ruler.SUN else f"unexpected first hour ruler {first}",
            compute_time_ms=round(elapsed_ms, 3),
            first_hour_ruler=first.value,
        )
    except Exception as e:
        checks["engine"] = EngineCheck(status="error", error=str(e))

    # 2. Ephemeris sources
    try:
        from config.feature_flags import get_feature_flags
        from interfaces.ephemeris_source import get_registry

        sources = get_registry().list_sources()
        fetch_enabled = get_feature_flags().ENABLE_EPHEMERIS_FETCH
        checks["ephemeris_sources"] = EphemerisSourcesCheck(
            status="ok" if sources or not fetch_enabled else "warning",
            registered_count=len(sources),
            sources=sources,
            fetch_enabled=fetch_enabled,
        )
    except Exception as e:
        checks["ephemeris_sources"] = EphemerisSourcesCheck(
            status="error", error=str(e), registered_count=0, sources=[], fetch_enabled=False
        )

    # 3. Result cache
    try:
        from app.services.planetary_hours_service import get_planetary_hours_service

        service = get_planetary_hours_service()
        stats = service.cache.get_stats()
        checks["result_cache"] = ResultCacheCheck(
            status="ok",
            enabled=service.cache_config.enabled,
            size=stats["size"],
            hit_rate=round(stats["hit_rate"], 4),
        )
    except Exception as e:
        checks["result_cache"] = ResultCacheCheck(status="error", error=str(e), enabled=False)

    return checks


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "Service is ready"},
        503: {"description": "Service is not ready"},
    },
    summary="Readiness",
    operation_id="health_ready",
)
async def readiness_check() -> ReadinessResponse:
    """
    Kubernetes readiness probe endpoint.

    Returns 200 OK if all critical dependencies are functional.
    Returns 503 Service Unavailable if any critical systems are failing.

    This endpoint validates:
    - Planetary hours engine (fixed-day self-test, no network)
    - Ephemeris source registry
    - Result cache
    """
    timestamp = datetime.now(UTC)

    dependency_checks = await _check_core_dependencies()

    critical_failures = []
    warnings = []

    for check_name, check_result in dependency_checks.items():
        if check_result.status == "error":
            critical_failures.append(
                f"{check_name}: {check_result.error or 'unknown error'}"
            )
        elif check_result.status == "warning":
            warnings.append(f"{check_name}: degraded functionality")

    summary = HealthSummary(
        total_checks=len(dependency_checks),
        passing=len([c for c in dependency_checks.values() if c.status == "ok"]),
        warnings=len([c for c in dependency_checks.values() if c.status == "warning"]),
        failures=len(critical_failures),
    )

    response = ReadinessResponse(
        status="ready" if not critical_failures else "not_ready",
        timestamp=timestamp,
        checks=dependency_checks,
        summary=summary,
        errors=critical_failures if critical_failures else None,
        warnings=warnings if warnings else None,
    )

    # Return with appropriate status code - FastAPI handles Pydantic serialization
    if critical_failures:
        return JSONResponse(
            content=response.model_dump(mode='json'), status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )
    else:
        return response


@router.get(
    "/health/version",
    response_model=VersionResponse,
    summary="Version",
    operation_id="health_version",
)
async def version_info() -> VersionResponse:
    """
    Get version and environment information.

    Useful for deployment verification and debugging.
    """
    from app.core.environment import get_environment
    from config.feature_flags import get_feature_flags

    return VersionResponse(
        api_version=SERVICE_VERSION,
        python_version=f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        environment=get_environment(),
        features=get_feature_flags().enabled_features(),
        timestamp=datetime.now(UTC),
    )
