"""
metrics.py: Prometheus metrics for the planetary hours service.

Metrics:
- ph_compute_total{outcome} - Hour computations by outcome
- ph_compute_latency_seconds - Time spent in compute()
- ph_ephemeris_fetch_total{source,outcome} - Upstream sunrise/sunset lookups
- ph_ephemeris_fetch_latency_seconds{source} - Upstream lookup latency
- ph_cache_events_total{event} - Result cache hits/misses/writes
- ph_alerts_planned_total - Hour alerts handed to a scheduler
- ph_ephemeris_sources_registered - Registered ephemeris sources
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, Info

# ===========================
# ENGINE METRICS
# ===========================

ph_compute_total = Counter(
    "ph_compute_total",
    "Planetary hour computations",
    ["outcome"],  # outcome: success, invalid_ephemeris, upstream_error
)

ph_compute_latency_seconds = Histogram(
    "ph_compute_latency_seconds",
    "Time spent partitioning a day into planetary hours",
    buckets=(0.0001, 0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, float("inf")),
)

# ===========================
# UPSTREAM METRICS
# ===========================

ph_ephemeris_fetch_total = Counter(
    "ph_ephemeris_fetch_total",
    "Sunrise/sunset lookups against an ephemeris source",
    ["source", "outcome"],  # outcome: success, http_error, transport_error, bad_status, bad_payload
)

ph_ephemeris_fetch_latency_seconds = Histogram(
    "ph_ephemeris_fetch_latency_seconds",
    "Latency of a full ephemeris window lookup (including retries)",
    ["source"],
    buckets=(
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
        30.0,
        float("inf"),
    ),
)

ph_ephemeris_sources_registered = Gauge(
    "ph_ephemeris_sources_registered",
    "Number of ephemeris sources in the registry",
)

# ===========================
# CACHE / ALERT METRICS
# ===========================

ph_cache_events_total = Counter(
    "ph_cache_events_total",
    "Result cache events",
    ["event"],  # event: hit, miss, write
)

ph_alerts_planned_total = Counter(
    "ph_alerts_planned_total",
    "Hour alerts handed to a notification scheduler",
)

ph_service_info = Info("ph_service", "Planetary hours service build information")


# ===========================
# METRIC COLLECTION HELPERS
# ===========================


class PlanetaryHoursMetricsCollector:
    """Helper class to record planetary hours service metrics."""

    def record_compute(self, outcome: str, duration_seconds: float | None = None):
        """Record one hour computation and optionally its latency."""
        ph_compute_total.labels(outcome=outcome).inc()
        if duration_seconds is not None:
            ph_compute_latency_seconds.observe(duration_seconds)

    def record_ephemeris_fetch(self, source: str, outcome: str):
        """Record an upstream sunrise/sunset lookup."""
        ph_ephemeris_fetch_total.labels(source=source, outcome=outcome).inc()

    def observe_ephemeris_latency(self, source: str, duration_seconds: float):
        """Record the latency of a full window lookup."""
        ph_ephemeris_fetch_latency_seconds.labels(source=source).observe(duration_seconds)

    def record_cache_event(self, event: str):
        ph_cache_events_total.labels(event=event).inc()

    def record_alerts_planned(self, count: int):
        if count > 0:
            ph_alerts_planned_total.inc(count)

    def set_sources_registered(self, count: int):
        ph_ephemeris_sources_registered.set(count)


# Global metrics collector instance
metrics_collector = PlanetaryHoursMetricsCollector()


# ===========================
# INITIALIZATION
# ===========================


def initialize_service_metrics(version: str, environment: str):
    """Initialize service metrics with static information."""
    ph_service_info.info(
        {
            "version": version,
            "service": "planetary_hours",
            "environment": environment,
            "ephemeris": "sunrise_sunset_org",
        }
    )
