#!/usr/bin/env python3
"""
Initialize and register ephemeris sources
This module is called during API startup to register available sources
"""

import logging

from app.core.environment import get_ephemeris_config

from .ephemeris_source import get_registry

logger = logging.getLogger(__name__)


def initialize_sources() -> dict[str, bool]:
    """
    Initialize and register all available ephemeris sources, then select
    the configured default (EPHEMERIS_SOURCE)

    Returns:
        Dict of source id to registration status
    """
    from api.services.metrics import metrics_collector
    from app.services.sunrise_service import SunriseSunsetClient

    config = get_ephemeris_config()
    registry = get_registry()
    results = {}

    # Register sunrise-sunset.org (always available)
    try:
        source = SunriseSunsetClient(config)
        registry.register(source, force=True)
        results[source.id] = True
        logger.info("sunrise-sunset.org source registered successfully")
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to register sunrise-sunset.org source: {e}")
        results[SunriseSunsetClient.id] = False

    if config.source in registry.list_sources():
        registry.set_default(config.source)
    else:
        logger.warning(
            f"Configured ephemeris source '{config.source}' is not registered; "
            f"keeping default '{registry.default_source}'"
        )

    metrics_collector.set_sources_registered(len(registry.list_sources()))
    return results


async def shutdown_sources():
    """Close network clients held by registered sources"""
    registry = get_registry()
    for source_id in registry.list_sources():
        source = registry.get(source_id)
        aclose = getattr(source, "aclose", None)
        if aclose is not None:
            await aclose()
            logger.info(f"Closed ephemeris source: {source_id}")
