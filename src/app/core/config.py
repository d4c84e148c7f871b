#!/usr/bin/env python3
"""
Application configuration
"""

import os

# Service identity
SERVICE_NAME = "Planetary Hours API"
SERVICE_VERSION = os.getenv("SERVICE_VERSION", "1.0.0")

# Upstream sunrise/sunset provider (https://sunrise-sunset.org/api)
SUNRISE_API_URL = os.getenv("SUNRISE_API_URL", "https://api.sunrise-sunset.org/json")
DEFAULT_EPHEMERIS_SOURCE = os.getenv("EPHEMERIS_SOURCE", "sunrise_sunset_org")

# Fallback location when a caller opts into it explicitly (Greenwich)
DEFAULT_LATITUDE = float(os.getenv("DEFAULT_LATITUDE", "51.4769"))
DEFAULT_LONGITUDE = float(os.getenv("DEFAULT_LONGITUDE", "-0.0005"))

# Display defaults
DEFAULT_TIME_FORMAT = os.getenv("DEFAULT_TIME_FORMAT", "24h")  # "24h" or "12h"
DEFAULT_DISPLAY_SECONDS = os.getenv("DEFAULT_DISPLAY_SECONDS", "true").lower() == "true"

# Cache key precision for coordinates (decimal places, ~11 m at 4)
CACHE_COORD_PLACES = 4
