#!/usr/bin/env python3
"""
Shared OpenAPI helpers and reusable response docs.
"""

from __future__ import annotations

from typing import Any, Dict


# Reusable default error responses for routers. These are documentation-only
# (the global exception handler already returns RFC7807 Problem JSON).
DEFAULT_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    403: {"description": "Feature disabled"},
    422: {"description": "Validation Error or invalid ephemeris window"},
    500: {"description": "Server Error"},
    502: {"description": "Ephemeris source failed"},
    503: {"description": "No ephemeris source available"},
}

PROBLEM_MEDIA_TYPE = "application/problem+json"
