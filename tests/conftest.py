import os

from datetime import date, datetime, timedelta, timezone

import pytest


# Keep tests hermetic: no CORS defaults, no upstream lookups unless a fake source is registered
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("EPHEMERIS_BACKOFF_SECONDS", "0")


class FakeEphemerisSource:
    """Deterministic source: sunrise 06:00, sunset 18:00 UTC every day."""

    id = "fake"
    version = "0.0.1"

    def __init__(self):
        self.calls: list[date] = []

    async def fetch_window(self, civil_date, location):
        from modules.planetary_hours import validate

        self.calls.append(civil_date)
        sunrise = datetime(civil_date.year, civil_date.month, civil_date.day, 6, tzinfo=timezone.utc)
        return validate(
            sunrise,
            sunrise + timedelta(hours=12),
            sunrise + timedelta(hours=24),
        )

    async def health_check(self):
        return {"status": "healthy", "source": self.id}


@pytest.fixture(autouse=True)
def _reset_singletons():
    from app.services.notification_service import reset_notification_scheduler
    from app.services.planetary_hours_service import reset_planetary_hours_service
    from config.feature_flags import reset_feature_flags

    reset_feature_flags()
    reset_planetary_hours_service()
    reset_notification_scheduler()
    yield
    reset_feature_flags()
    reset_planetary_hours_service()
    reset_notification_scheduler()


@pytest.fixture
def ephemeris_source():
    """Unregistered fake source for tests that build their own registry."""
    return FakeEphemerisSource()


@pytest.fixture
def fake_source(ephemeris_source):
    """Fake source registered in the process-wide registry."""
    from interfaces.ephemeris_source import ephemeris_registry

    ephemeris_registry.register(ephemeris_source, force=True)
    yield ephemeris_source
    ephemeris_registry.unregister(ephemeris_source.id)


@pytest.fixture(scope="session")
def client():
    from fastapi.testclient import TestClient
    from apps.api.main import app

    return TestClient(app)


@pytest.fixture(scope="session")
def openapi_spec(client):
    r = client.get("/openapi.json")
    r.raise_for_status()
    return r.json()


@pytest.fixture
def sunday_window():
    """Sunday 2024-01-07: 06:00-18:00 UTC day, next sunrise 06:00."""
    from modules.planetary_hours import validate

    sunrise = datetime(2024, 1, 7, 6, 0, tzinfo=timezone.utc)
    return validate(sunrise, sunrise + timedelta(hours=12), sunrise + timedelta(hours=24))
