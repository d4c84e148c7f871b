#!/usr/bin/env python3
"""
Sunrise-sunset.org ephemeris source

Fetches sunrise/sunset for a civil date and sunrise for the following date
from https://api.sunrise-sunset.org/json (formatted=0 yields ISO-8601 UTC
instants). Both dates are requested concurrently.
"""

import asyncio
import time

from collections.abc import Mapping
from datetime import date, datetime, timedelta
from typing import Any

import httpx

from api.services.metrics import metrics_collector
from app.core.config import SUNRISE_API_URL
from app.core.environment import EphemerisConfig, get_ephemeris_config
from app.core.logging import get_adapter_logger
from interfaces.ephemeris_source import EphemerisSourceError
from modules.planetary_hours import EphemerisWindow, GeoLocation, validate

logger = get_adapter_logger("sunrise_sunset_org")

SOURCE_ID = "sunrise_sunset_org"


def _parse_instant(payload: Mapping[str, Any], field: str) -> datetime:
    value = payload.get(field)
    if not isinstance(value, str):
        raise EphemerisSourceError(SOURCE_ID, f"missing '{field}' in response")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise EphemerisSourceError(SOURCE_ID, f"malformed '{field}': {value!r}") from e
    if parsed.tzinfo is None:
        raise EphemerisSourceError(SOURCE_ID, f"'{field}' has no UTC offset: {value!r}")
    return parsed


class SunriseSunsetClient:
    """
    Async client for api.sunrise-sunset.org

    Transport errors and 5xx responses are retried with exponential
    backoff. 4xx responses and non-OK upstream statuses fail immediately.
    """

    id = SOURCE_ID
    version = "1.0.0"

    def __init__(
        self,
        config: EphemerisConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config or get_ephemeris_config()
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout_seconds, connect=5.0),
                headers={"Accept": "application/json"},
            )
        return self._client

    async def aclose(self):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch_day(self, civil_date: date, location: GeoLocation) -> Mapping[str, Any]:
        """
        Fetch the raw 'results' object for one date

        Raises:
            EphemerisSourceError: HTTP failure, non-OK status or bad JSON
        """
        params = {
            "lat": location.latitude,
            "lng": location.longitude,
            "date": civil_date.isoformat(),
            "formatted": 0,
        }
        url = self.config.base_url or SUNRISE_API_URL

        attempt = 0
        while True:
            try:
                response = await self.client.get(url, params=params)
            except httpx.TransportError as e:
                if attempt < self.config.max_retries:
                    await self._backoff(attempt, f"transport error: {e}")
                    attempt += 1
                    continue
                metrics_collector.record_ephemeris_fetch(self.id, "transport_error")
                raise EphemerisSourceError(self.id, f"transport error: {e}") from e

            if response.status_code >= 500 and attempt < self.config.max_retries:
                await self._backoff(attempt, f"HTTP {response.status_code}")
                attempt += 1
                continue
            break

        if response.status_code >= 400:
            metrics_collector.record_ephemeris_fetch(self.id, "http_error")
            raise EphemerisSourceError(
                self.id,
                f"HTTP {response.status_code}: {response.text[:200]}",
                http_status=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            metrics_collector.record_ephemeris_fetch(self.id, "bad_payload")
            raise EphemerisSourceError(self.id, "response is not JSON") from e

        status = body.get("status") if isinstance(body, dict) else None
        if status != "OK":
            metrics_collector.record_ephemeris_fetch(self.id, "bad_status")
            raise EphemerisSourceError(
                self.id, f"upstream status {status}", status=status
            )

        results = body.get("results")
        if not isinstance(results, dict):
            metrics_collector.record_ephemeris_fetch(self.id, "bad_payload")
            raise EphemerisSourceError(self.id, "missing 'results' in response")

        metrics_collector.record_ephemeris_fetch(self.id, "success")
        return results

    async def _backoff(self, attempt: int, reason: str):
        delay = self.config.backoff_seconds * (2**attempt)
        logger.warning(
            f"Retrying sunrise-sunset.org request in {delay:.2f}s ({reason})",
            extra={"attempt": attempt + 1, "max_retries": self.config.max_retries},
        )
        await asyncio.sleep(delay)

    async def fetch_window(
        self, civil_date: date, location: GeoLocation
    ) -> EphemerisWindow:
        """
        Fetch sunrise/sunset for civil_date and sunrise for the next date

        Raises:
            EphemerisSourceError: Upstream failure
            InvalidEphemerisError: Upstream instants are not strictly ordered
        """
        start = time.perf_counter()
        today, tomorrow = await asyncio.gather(
            self.fetch_day(civil_date, location),
            self.fetch_day(civil_date + timedelta(days=1), location),
        )
        duration = time.perf_counter() - start
        metrics_collector.observe_ephemeris_latency(self.id, duration)

        window = validate(
            _parse_instant(today, "sunrise"),
            _parse_instant(today, "sunset"),
            _parse_instant(tomorrow, "sunrise"),
        )
        logger.info(
            f"Fetched ephemeris window for {civil_date.isoformat()}",
            extra={"duration_ms": round(duration * 1000, 2), **window.to_dict()},
        )
        return window

    async def health_check(self) -> Mapping[str, Any]:
        """Probe the upstream with a fixed location and today's date"""
        try:
            await self.fetch_day(date.today(), GeoLocation(0.0, 0.0))
            return {"status": "healthy", "source": self.id}
        except EphemerisSourceError as e:
            return {"status": "unhealthy", "source": self.id, "error": e.message}
