#!/usr/bin/env python3
"""
Ephemeris source protocol and registry

An ephemeris source answers one question: for a civil date and a location,
when are sunrise, sunset and the following sunrise? Sources are registered
by id so the service layer can route requests to a selected provider.
"""

import logging
import threading

from collections.abc import Mapping
from datetime import date
from typing import Any, Protocol, runtime_checkable

from modules.planetary_hours import EphemerisWindow, GeoLocation

logger = logging.getLogger(__name__)


class EphemerisSourceError(Exception):
    """An ephemeris source could not produce a window."""

    def __init__(
        self,
        source_id: str,
        message: str,
        *,
        status: str | None = None,
        http_status: int | None = None,
    ):
        super().__init__(f"{source_id}: {message}")
        self.source_id = source_id
        self.message = message
        self.status = status
        self.http_status = http_status

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source_id,
            "message": self.message,
            "upstream_status": self.status,
            "http_status": self.http_status,
        }


class EphemerisSourceUnavailableError(EphemerisSourceError):
    """No default ephemeris source is registered to serve a lookup."""

    def __init__(self, source_id: str):
        super().__init__(source_id, f"default ephemeris source '{source_id}' not registered")


@runtime_checkable
class EphemerisSource(Protocol):
    """
    Protocol for sunrise/sunset providers

    Implementations must return a validated EphemerisWindow whose instants
    are timezone-aware.
    """

    id: str
    version: str

    async def fetch_window(
        self, civil_date: date, location: GeoLocation
    ) -> EphemerisWindow:
        """
        Fetch sunrise and sunset for civil_date and sunrise for the next date

        Raises:
            EphemerisSourceError: provider failed or returned an unusable payload
            InvalidEphemerisError: provider instants violate the day/night ordering
        """
        ...

    async def health_check(self) -> Mapping[str, Any]:
        """Return {"status": "healthy"|"unhealthy", ...}"""
        ...


class EphemerisSourceRegistry:
    """
    Thread-safe registry for ephemeris sources
    """

    def __init__(self, default_source: str = "sunrise_sunset_org"):
        self._sources: dict[str, EphemerisSource] = {}
        self._lock = threading.Lock()
        self._default_source = default_source

    def register(self, source: EphemerisSource, force: bool = False) -> bool:
        """
        Register an ephemeris source

        Args:
            source: EphemerisSource implementation
            force: If True, overwrite an existing source with the same id

        Returns:
            True if registered successfully

        Raises:
            ValueError: If the id is taken and force=False
            TypeError: If the object does not implement EphemerisSource
        """
        if not isinstance(source, EphemerisSource):
            raise TypeError(
                f"{type(source).__name__} does not implement EphemerisSource protocol"
            )

        with self._lock:
            if source.id in self._sources and not force:
                raise ValueError(
                    f"Ephemeris source '{source.id}' already registered. Use force=True to override."
                )
            self._sources[source.id] = source
            logger.info(f"Registered ephemeris source: {source.id} v{source.version}")
            return True

    def unregister(self, source_id: str) -> bool:
        with self._lock:
            if source_id in self._sources:
                del self._sources[source_id]
                logger.info(f"Unregistered ephemeris source: {source_id}")
                return True
            return False

    def get(self, source_id: str) -> EphemerisSource | None:
        with self._lock:
            return self._sources.get(source_id)

    def get_or_default(self, source_id: str | None = None) -> EphemerisSource:
        """
        Get a source or fall back to the default

        Raises:
            ValueError: If an explicitly named source is unknown
            EphemerisSourceUnavailableError: If no default source is registered
        """
        if source_id is not None:
            source = self.get(source_id)
            if source is None:
                raise ValueError(f"Ephemeris source '{source_id}' not registered")
            return source

        source = self.get(self._default_source)
        if source is None:
            raise EphemerisSourceUnavailableError(self._default_source)
        return source

    @property
    def default_source(self) -> str:
        return self._default_source

    def set_default(self, source_id: str):
        if source_id not in self._sources:
            raise ValueError(f"Cannot set default to unregistered source '{source_id}'")
        self._default_source = source_id
        logger.info(f"Set default ephemeris source to: {source_id}")

    def list_sources(self) -> list[str]:
        with self._lock:
            return list(self._sources.keys())

    def clear(self):
        """Clear all registered sources (use with caution)"""
        with self._lock:
            self._sources.clear()
            logger.warning("Cleared all ephemeris sources from registry")


# Global registry instance
ephemeris_registry = EphemerisSourceRegistry()


def get_registry() -> EphemerisSourceRegistry:
    """Get the global ephemeris source registry"""
    return ephemeris_registry
