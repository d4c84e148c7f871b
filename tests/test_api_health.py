"""
Availability endpoints and service metadata.
"""
from __future__ import annotations


def test_docs_and_metrics_accessible(client):
    docs = client.get("/api/docs")
    metrics = client.get("/metrics")
    assert docs.status_code in (200, 308)
    assert metrics.status_code == 200
    assert "ph_compute_total" in metrics.text


def test_health_up_plaintext(client):
    r = client.get("/api/v1/health/up")
    assert r.status_code == 200
    assert r.text == "ok"


def test_health_live(client):
    r = client.get("/api/v1/health/live")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_ready_runs_engine_self_test(client):
    r = client.get("/api/v1/health/ready")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ready"
    engine = body["checks"]["engine"]
    assert engine["status"] == "ok"
    assert engine["first_hour_ruler"] == "Sun"
    assert body["checks"]["result_cache"]["enabled"] is True
    assert body["summary"]["failures"] == 0


def test_ready_warns_without_sources(client):
    # Lifespan is not entered by this client, so no upstream source is registered
    r = client.get("/api/v1/health/ready")
    sources = r.json()["checks"]["ephemeris_sources"]
    assert sources["fetch_enabled"] is True
    assert sources["registered_count"] == 0
    assert sources["status"] == "warning"


def test_ready_lists_registered_sources(client, fake_source):
    r = client.get("/api/v1/health/ready")
    sources = r.json()["checks"]["ephemeris_sources"]
    assert sources["status"] == "ok"
    assert "fake" in sources["sources"]


def test_version_reports_features(client):
    r = client.get("/api/v1/health/version")
    assert r.status_code == 200
    body = r.json()
    assert body["api_version"]
    assert body["environment"] == "test"
    assert "ENABLE_PLANETARY_HOURS" in body["features"]


def test_root_info(client):
    r = client.get("/")
    assert r.status_code == 200
    info = r.json()
    assert info["service"] == "Planetary Hours API"
    assert info["endpoints"]["planetary_hours"] == "/api/v1/planetary-hours"


def test_reference_tables(client):
    order = client.get("/api/v1/ref/chaldean-order").json()
    assert order["count"] == 7
    assert [r["name"] for r in order["data"]][:4] == ["Saturn", "Jupiter", "Mars", "Sun"]

    days = client.get("/api/v1/ref/day-rulers").json()
    sunday = next(d for d in days["data"] if d["day"] == "Sunday")
    assert sunday == {"day": "Sunday", "ruler": "Sun", "start_index": 3}


def test_unknown_route_is_a_problem_document(client):
    r = client.get("/api/v1/nothing-here")
    assert r.status_code == 404
    assert r.headers["content-type"].startswith("application/problem+json")
