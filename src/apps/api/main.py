#!/usr/bin/env python3
"""
Planetary Hours API - Main Application
FastAPI application computing the 24 planetary hours of a day
"""

import os
import uuid

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.middleware.request_id import RequestIDMiddleware
from api.models.responses import Problem, ServiceInfoResponse
from api.routers.health import router as health_router
from api.routers.planetary_hours import router as planetary_hours_router
from api.routers.ref import router as ref_router
from api.services.metrics import initialize_service_metrics
from app.core.config import SERVICE_NAME, SERVICE_VERSION
from app.core.environment import get_complete_config
from app.core.logging import get_api_logger, setup_logging
from app.openapi.common import PROBLEM_MEDIA_TYPE
from app.services.planetary_hours_service import EphemerisFetchDisabledError
from config.feature_flags import get_feature_flags
from interfaces.ephemeris_source import EphemerisSourceError, EphemerisSourceUnavailableError
from interfaces.initialize import initialize_sources, shutdown_sources
from modules.planetary_hours import InvalidEphemerisError, PlanetaryHoursError

# Initialize structured logging EARLY (before any logger usage)
setup_logging(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format_json=os.getenv("LOG_FORMAT", "json").lower() == "json",
)
logger = get_api_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info(f"Starting {SERVICE_NAME}...")

    try:
        _startup_initialization()
        yield
    finally:
        await _graceful_shutdown(app)


def _startup_initialization():
    """Initialize core application components."""
    config = get_complete_config()
    results = initialize_sources()
    logger.info(f"Ephemeris sources registered: {results}")

    initialize_service_metrics(SERVICE_VERSION, config.env_type)
    logger.info(f"Enabled features: {get_feature_flags().enabled_features()}")
    logger.info(
        f"Result cache: enabled={config.cache.enabled} ttl={config.cache.ttl_seconds}s "
        f"max_entries={config.cache.max_entries}"
    )


async def _graceful_shutdown(app: FastAPI):
    """Handle graceful application shutdown."""
    logger.info("Initiating graceful shutdown...")
    app.state.accepting_connections = False
    await shutdown_sources()
    logger.info(f"{SERVICE_NAME} shutdown complete")


app = FastAPI(
    title=SERVICE_NAME,
    description="Planetary hours from sunrise, sunset and next sunrise, ruled in Chaldean order",
    version=SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)


def configure_cors_security():
    """Configure CORS with production-grade security controls."""
    env = os.getenv("ENVIRONMENT", "development").lower()
    cors_origins_env = os.getenv("CORS_ALLOWED_ORIGINS", "").strip()

    allowed_origins = [
        origin.strip() for origin in cors_origins_env.split(",") if origin.strip()
    ]

    for origin in allowed_origins:
        if origin == "*" and env == "production":
            raise RuntimeError(
                "CORS Security Error: Wildcard origins prohibited in production"
            )
        if origin != "*" and not origin.startswith(("http://", "https://")):
            logger.error(f"CORS origin must start with http:// or https://: {origin}")
            if env == "production":
                raise RuntimeError(
                    f"CORS Security Error: Origin must include protocol: {origin}"
                )

    if not allowed_origins:
        if env == "production":
            raise RuntimeError(
                "CORS Security Error: CORS_ALLOWED_ORIGINS required for production. "
                "Set specific domains, never use wildcard (*) in production."
            )
        if env == "development":
            allowed_origins = [
                "http://localhost:3000",
                "http://localhost:8000",
                "http://localhost:8080",
            ]
            logger.warning("DEVELOPMENT: Using default localhost CORS origins")

    logger.info(f"CORS: environment={env} origins={len(allowed_origins)}")

    return {
        "allow_origins": allowed_origins,
        "allow_credentials": True,
        "allow_methods": ["GET", "POST", "OPTIONS"],
        "allow_headers": ["accept", "content-type", "origin", "x-request-id"],
        "expose_headers": ["x-request-id", "x-service-version"],
        "max_age": 86400,  # 24 hours preflight cache
    }


# Configure CORS with security validation
app.add_middleware(CORSMiddleware, **configure_cors_security())
app.add_middleware(RequestIDMiddleware, service_version=SERVICE_VERSION)

app.include_router(health_router, prefix="/api/v1")
app.include_router(planetary_hours_router)
app.include_router(ref_router)


# Prometheus metrics endpoint
@app.get("/metrics", response_class=PlainTextResponse, tags=["health"], operation_id="metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    return PlainTextResponse(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/", response_model=ServiceInfoResponse, tags=["health"], operation_id="service_info")
async def root() -> ServiceInfoResponse:
    return ServiceInfoResponse(
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        status="operational",
        docs="/api/docs",
        endpoints={
            "planetary_hours": "/api/v1/planetary-hours",
            "current_hour": "/api/v1/planetary-hours/current",
            "alerts": "/api/v1/planetary-hours/alerts",
            "health": "/api/v1/health/ready",
            "metrics": "/metrics",
        },
    )


def _problem_response(request: Request, problem: Problem) -> JSONResponse:
    req_id = getattr(request.state, "request_id", None) or request.headers.get("x-request-id") or str(uuid.uuid4())
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(exclude_none=True),
        media_type=PROBLEM_MEDIA_TYPE,
        headers={"X-Request-ID": req_id},
    )


# Global HTTPException handler emitting RFC7807 Problem Details (covers routing 404/405 too)
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = None
    title = "HTTP error"
    if isinstance(exc.detail, dict):
        title = exc.detail.get("title") or title
        detail = exc.detail.get("detail") or detail
    elif isinstance(exc.detail, str):
        title = exc.detail
    code = "FEATURE_DISABLED" if exc.status_code == 403 else None
    problem = Problem(
        title=title,
        status=exc.status_code,
        detail=detail,
        instance=str(request.url),
        code=code,
    )
    return _problem_response(request, problem)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problem = Problem(
        title="Validation Error",
        status=422,
        detail="Request parameters failed validation",
        instance=str(request.url),
        code="VALIDATION_ERROR",
        errors={"fields": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()]},
    )
    return _problem_response(request, problem)


@app.exception_handler(InvalidEphemerisError)
async def invalid_ephemeris_handler(request: Request, exc: InvalidEphemerisError):
    logger.warning(f"Invalid ephemeris window: {exc.violation.name}")
    problem = Problem(
        title="Invalid ephemeris window",
        status=422,
        detail=str(exc),
        instance=str(request.url),
        code="INVALID_EPHEMERIS",
        errors=exc.to_dict(),
    )
    return _problem_response(request, problem)


@app.exception_handler(EphemerisSourceError)
async def ephemeris_source_handler(request: Request, exc: EphemerisSourceError):
    problem = Problem(
        title="Ephemeris source failed",
        status=502,
        detail=exc.message,
        instance=str(request.url),
        code="EPHEMERIS_UPSTREAM",
        errors=exc.to_dict(),
    )
    return _problem_response(request, problem)


@app.exception_handler(EphemerisSourceUnavailableError)
async def ephemeris_unavailable_handler(request: Request, exc: EphemerisSourceUnavailableError):
    problem = Problem(
        title="Ephemeris source unavailable",
        status=503,
        detail=exc.message,
        instance=str(request.url),
        code="EPHEMERIS_UNAVAILABLE",
        errors={"source": exc.source_id},
    )
    return _problem_response(request, problem)


@app.exception_handler(EphemerisFetchDisabledError)
async def fetch_disabled_handler(request: Request, exc: EphemerisFetchDisabledError):
    problem = Problem(
        title="Feature disabled",
        status=403,
        detail=str(exc),
        instance=str(request.url),
        code="FEATURE_DISABLED",
    )
    return _problem_response(request, problem)


@app.exception_handler(PlanetaryHoursError)
async def engine_error_handler(request: Request, exc: PlanetaryHoursError):
    # Unknown day or ruler names never come from request data
    logger.error(f"Planetary hours engine error: {exc}")
    problem = Problem(
        title="Internal Server Error",
        status=500,
        detail=str(exc)[:200],
        instance=str(request.url),
        code="ENGINE_ERROR",
    )
    return _problem_response(request, problem)


# Fallback handler for uncaught exceptions
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc!r}")
    problem = Problem(title="Internal Server Error", status=500, detail=str(exc)[:200], instance=str(request.url), code="INTERNAL_ERROR")
    return _problem_response(request, problem)


# Custom OpenAPI schema with metadata (servers/contact)
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    schema = get_openapi(
        title=app.title,
        version=os.getenv("OPENAPI_VERSION", SERVICE_VERSION),
        description=app.description,
        routes=app.routes,
    )
    public_url = os.getenv("OPENAPI_PUBLIC_URL") or "/"
    schema["servers"] = [{"url": public_url}]
    schema.setdefault("info", {}).setdefault("contact", {})
    schema["info"]["contact"].update(
        {"name": "Planetary Hours Support", "email": os.getenv("SUPPORT_EMAIL", "support@example.com")}
    )
    schema["info"].setdefault("x-build", {})
    schema["info"]["x-build"]["sha"] = os.getenv("BUILD_SHA", "unknown")

    # Problem documents are the error body for every operation
    components = schema.setdefault("components", {}).setdefault("schemas", {})
    components.setdefault("Problem", Problem.model_json_schema())
    for methods in schema.get("paths", {}).values():
        for op in methods.values():
            if not isinstance(op, dict):
                continue
            for code, response in op.get("responses", {}).items():
                if str(code).startswith(("4", "5")) and isinstance(response, dict):
                    response.setdefault("content", {})[PROBLEM_MEDIA_TYPE] = {
                        "schema": {"$ref": "#/components/schemas/Problem"}
                    }

    app.openapi_schema = schema
    return app.openapi_schema


app.openapi = custom_openapi
