"""
Planetary hours endpoints end to end through the FastAPI app.

Explicit instants keep most tests offline; tests that need a lookup
register the fake ephemeris source from conftest.
"""
from __future__ import annotations

from datetime import date, datetime

import pytest

from config.feature_flags import reset_feature_flags
from interfaces.ephemeris_source import EphemerisSourceError, ephemeris_registry

URL = "/api/v1/planetary-hours"

SUNDAY = {
    "date": "2024-01-07",
    "latitude": 40.7128,
    "longitude": -74.006,
    "sunrise": "2024-01-07T06:00:00Z",
    "sunset": "2024-01-07T18:00:00Z",
    "next_sunrise": "2024-01-08T06:00:00Z",
}


def _instant(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class FailingSource:
    id = "failing"
    version = "0.0.1"

    async def fetch_window(self, civil_date, location):
        raise EphemerisSourceError(self.id, "upstream status INVALID_REQUEST", status="INVALID_REQUEST")

    async def health_check(self):
        return {"status": "unhealthy", "source": self.id}


@pytest.fixture
def failing_source():
    source = FailingSource()
    ephemeris_registry.register(source, force=True)
    yield source
    ephemeris_registry.unregister(source.id)


def test_calculate_with_explicit_instants(client):
    r = client.post(URL, json={**SUNDAY, "at": "2024-01-07T10:30:00Z"})
    assert r.status_code == 200
    body = r.json()

    general = body["general"]
    assert general["date"] == "2024-01-07"
    assert general["day_of_week"] == "Sunday"
    assert general["planetary_ruler"] == "Sun"
    assert general["location_source"] == "request"
    assert general["timezone"] == "UTC"

    assert len(body["solar_hours"]) == 12
    assert len(body["lunar_hours"]) == 12
    assert body["solar_hours"][0]["ruler"] == "Sun"
    assert body["solar_hours"][11]["ruler"] == "Saturn"
    assert body["lunar_hours"][0]["ruler"] == "Jupiter"

    fifth = body["solar_hours"][4]
    assert fifth["label"] == "5th Solar Hour"
    assert _instant(fifth["start"]) == _instant("2024-01-07T10:00:00Z")
    assert _instant(fifth["end"]) == _instant("2024-01-07T11:00:00Z")
    assert fifth["start_display"] == "10:00:00"
    assert fifth["is_current"] is True

    assert body["current_hour"]["ordinal"] == 5
    assert body["current_hour"]["ruler"] == "Saturn"
    assert _instant(body["window"]["next_sunrise"]) == _instant(SUNDAY["next_sunrise"])
    assert body["meta"] == {
        "instants": "request",
        "solar_hour_seconds": 3600.0,
        "lunar_hour_seconds": 3600.0,
    }


def test_no_current_hour_outside_the_day(client):
    r = client.post(URL, json={**SUNDAY, "at": "2024-01-08T07:00:00Z"})
    assert r.status_code == 200
    body = r.json()
    assert body["current_hour"] is None
    assert not any(s["is_current"] for s in body["solar_hours"] + body["lunar_hours"])


def test_twelve_hour_clock_in_display_zone(client):
    r = client.post(
        URL,
        json={**SUNDAY, "time_format": "12h", "seconds": False, "timezone": "America/New_York"},
    )
    assert r.status_code == 200
    first = r.json()["solar_hours"][0]
    # 06:00 UTC is 01:00 EST
    assert first["start_display"] == "01:00 AM"
    assert first["end_display"] == "02:00 AM"
    assert r.json()["general"]["timezone"] == "America/New_York"


def test_default_location_when_coordinates_omitted(client):
    payload = {k: v for k, v in SUNDAY.items() if k not in ("latitude", "longitude")}
    r = client.post(URL, json=payload)
    assert r.status_code == 200
    general = r.json()["general"]
    assert general["location_source"] == "default"
    assert general["latitude"] == pytest.approx(51.4769)


def test_latitude_without_longitude_is_rejected(client):
    payload = {**SUNDAY}
    del payload["longitude"]
    r = client.post(URL, json=payload)
    assert r.status_code == 422
    assert r.json()["code"] == "VALIDATION_ERROR"


def test_unknown_timezone_is_rejected(client):
    r = client.post(URL, json={**SUNDAY, "timezone": "Mars/Olympus_Mons"})
    assert r.status_code == 422


def test_inverted_window_is_invalid_ephemeris(client):
    r = client.post(
        URL,
        json={**SUNDAY, "sunrise": "2024-01-07T18:00:00Z", "sunset": "2024-01-07T06:00:00Z"},
    )
    assert r.status_code == 422
    assert r.headers["content-type"].startswith("application/problem+json")
    problem = r.json()
    assert problem["code"] == "INVALID_EPHEMERIS"
    assert problem["errors"]["violation"] == "DAY_NOT_POSITIVE"


def test_zero_length_night_is_invalid_ephemeris(client):
    r = client.post(URL, json={**SUNDAY, "next_sunrise": "2024-01-07T18:00:00Z"})
    assert r.status_code == 422
    problem = r.json()
    assert problem["code"] == "INVALID_EPHEMERIS"
    assert problem["errors"]["violation"] == "NIGHT_NOT_POSITIVE"


def test_naive_instants_are_invalid_ephemeris(client):
    r = client.post(
        URL,
        json={
            **SUNDAY,
            "sunrise": "2024-01-07T06:00:00",
            "sunset": "2024-01-07T18:00:00",
            "next_sunrise": "2024-01-08T06:00:00",
        },
    )
    assert r.status_code == 422
    assert r.json()["errors"]["violation"] == "NAIVE_INSTANT"


def test_partial_instants_are_rejected(client):
    payload = {k: v for k, v in SUNDAY.items() if k != "next_sunrise"}
    r = client.post(URL, json=payload)
    assert r.status_code == 422
    assert "supplied together" in r.json()["title"]


def test_missing_instants_are_fetched(client, fake_source):
    payload = {k: v for k, v in SUNDAY.items() if k not in ("sunrise", "sunset", "next_sunrise")}
    r = client.post(URL, json={**payload, "source": "fake"})
    assert r.status_code == 200
    assert r.json()["meta"]["instants"] == "fetched"
    assert fake_source.calls == [date(2024, 1, 7)]


def test_unregistered_source_is_rejected(client):
    payload = {k: v for k, v in SUNDAY.items() if k not in ("sunrise", "sunset", "next_sunrise")}
    r = client.post(URL, json={**payload, "source": "nowhere"})
    assert r.status_code == 422


def test_missing_default_source_is_service_unavailable(client):
    payload = {k: v for k, v in SUNDAY.items() if k not in ("sunrise", "sunset", "next_sunrise")}
    r = client.post(URL, json=payload)
    assert r.status_code == 503
    assert r.headers["content-type"].startswith("application/problem+json")
    problem = r.json()
    assert problem["code"] == "EPHEMERIS_UNAVAILABLE"
    assert problem["errors"]["source"] == ephemeris_registry.default_source


def test_upstream_failure_maps_to_bad_gateway(client, failing_source):
    payload = {k: v for k, v in SUNDAY.items() if k not in ("sunrise", "sunset", "next_sunrise")}
    r = client.post(URL, json={**payload, "source": "failing"})
    assert r.status_code == 502
    problem = r.json()
    assert problem["code"] == "EPHEMERIS_UPSTREAM"
    assert problem["errors"]["upstream_status"] == "INVALID_REQUEST"


def test_fetch_disabled_requires_instants(client, fake_source, monkeypatch):
    monkeypatch.setenv("ENABLE_EPHEMERIS_FETCH", "false")
    reset_feature_flags()
    payload = {k: v for k, v in SUNDAY.items() if k not in ("sunrise", "sunset", "next_sunrise")}
    r = client.post(URL, json={**payload, "source": "fake"})
    assert r.status_code == 403
    assert r.json()["code"] == "FEATURE_DISABLED"
    assert fake_source.calls == []


def test_feature_disabled(client, monkeypatch):
    monkeypatch.setenv("ENABLE_PLANETARY_HOURS", "false")
    reset_feature_flags()
    r = client.post(URL, json=SUNDAY)
    assert r.status_code == 403
    assert r.json()["code"] == "FEATURE_DISABLED"


def test_current_hour(client, fake_source):
    r = client.get(
        f"{URL}/current",
        params={"lat": 0.0, "lon": 0.0, "at": "2024-01-07T10:30:00Z", "source": "fake"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["general"]["date"] == "2024-01-07"
    assert body["current_hour"]["ordinal"] == 5
    assert body["current_hour"]["ruler"] == "Saturn"
    assert body["current_hour"]["is_current"] is True
    assert body["next_hour"]["ordinal"] == 6
    assert body["next_hour"]["ruler"] == "Jupiter"


def test_current_hour_before_sunrise_uses_previous_night(client, fake_source):
    r = client.get(
        f"{URL}/current",
        params={"lat": 0.0, "lon": 0.0, "at": "2024-01-08T05:30:00Z", "source": "fake"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["general"]["day_of_week"] == "Sunday"
    assert body["current_hour"]["half"] == "lunar"
    assert body["current_hour"]["ordinal"] == 12
    assert body["next_hour"] is None


def test_current_hour_requires_coordinates(client):
    r = client.get(f"{URL}/current", params={"lat": 0.0})
    assert r.status_code == 422


def test_alerts_for_remaining_hours(client):
    r = client.post(f"{URL}/alerts", json={**SUNDAY, "at": "2024-01-07T17:30:00Z"})
    assert r.status_code == 200
    body = r.json()
    assert body["date"] == "2024-01-07"
    assert body["scheduled"] == 12
    assert len(body["alerts"]) == 12
    assert body["alerts"][0]["title"] == "1st Lunar Hour - Jupiter Hour"
    assert _instant(body["alerts"][0]["fire_at"]) == _instant("2024-01-07T18:00:00Z")

    # Rescheduling replaces rather than appends
    r = client.post(f"{URL}/alerts", json={**SUNDAY, "at": "2024-01-08T04:30:00Z"})
    assert r.json()["scheduled"] == 1
    assert len(r.json()["alerts"]) == 1


def test_alerts_feature_disabled(client, monkeypatch):
    monkeypatch.setenv("ENABLE_HOUR_ALERTS", "false")
    reset_feature_flags()
    r = client.post(f"{URL}/alerts", json=SUNDAY)
    assert r.status_code == 403


def test_request_id_is_echoed(client):
    r = client.post(URL, json=SUNDAY, headers={"X-Request-ID": "req-123"})
    assert r.headers["X-Request-ID"] == "req-123"
    assert r.headers["X-Service-Version"]
