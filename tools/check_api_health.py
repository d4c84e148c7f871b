#!/usr/bin/env python3
"""
Planetary Hours API smoke check.

- Liveness via plaintext /api/v1/health/up, readiness as fallback.
- Optional --compute: POST a fixed Sunday with explicit instants and
  confirm the first day hour is ruled by the Sun (no upstream needed).
- Machine-friendly output with exit codes for CI/ops.

Usage examples:
  python tools/check_api_health.py
  python tools/check_api_health.py --base https://hours.example.com --compute --json
"""

from __future__ import annotations

import argparse
import json
import sys

import httpx

SUNDAY_PAYLOAD = {
    "date": "2024-01-07",
    "latitude": 0.0,
    "longitude": 0.0,
    "sunrise": "2024-01-07T06:00:00+00:00",
    "sunset": "2024-01-07T18:00:00+00:00",
    "next_sunrise": "2024-01-08T06:00:00+00:00",
}


def check_health(client: httpx.Client) -> dict:
    try:
        resp = client.get("/api/v1/health/up")
        if resp.status_code == 200 and resp.text.strip().lower() == "ok":
            return {
                "ok": True,
                "endpoint": "/api/v1/health/up",
                "status_code": resp.status_code,
                "latency_sec": round(resp.elapsed.total_seconds(), 3),
                "detail": "ok",
            }

        resp = client.get("/api/v1/health/ready")
        try:
            detail = resp.json().get("status")
        except ValueError:
            detail = resp.text[:120]
    except httpx.HTTPError as e:
        return {"ok": False, "endpoint": "/api/v1/health/up", "status_code": 0, "latency_sec": 0.0, "detail": str(e)}

    return {
        "ok": resp.status_code == 200 and detail == "ready",
        "endpoint": "/api/v1/health/ready",
        "status_code": resp.status_code,
        "latency_sec": round(resp.elapsed.total_seconds(), 3),
        "detail": detail,
    }


def check_compute(client: httpx.Client) -> dict:
    try:
        resp = client.post("/api/v1/planetary-hours", json=SUNDAY_PAYLOAD)
    except httpx.HTTPError as e:
        return {"ok": False, "endpoint": "/api/v1/planetary-hours", "status_code": 0, "latency_sec": 0.0, "detail": str(e)}

    detail = None
    ok = False
    if resp.status_code == 200:
        body = resp.json()
        first = body["solar_hours"][0]["ruler"]
        ok = first == "Sun" and len(body["solar_hours"]) == 12 and len(body["lunar_hours"]) == 12
        detail = f"first_hour={first}"
    else:
        detail = resp.text[:120]

    return {
        "ok": ok,
        "endpoint": "/api/v1/planetary-hours",
        "status_code": resp.status_code,
        "latency_sec": round(resp.elapsed.total_seconds(), 3),
        "detail": detail,
    }


def main() -> int:
    ap = argparse.ArgumentParser(description="Planetary Hours API health check")
    ap.add_argument(
        "--base",
        default="http://127.0.0.1:8000",
        help="Base URL (default: http://127.0.0.1:8000)",
    )
    ap.add_argument("--timeout", type=float, default=5.0, help="Per-request timeout seconds")
    ap.add_argument("--compute", action="store_true", help="Also run a fixed-day computation")
    ap.add_argument("--json", action="store_true", help="Emit JSON output")
    args = ap.parse_args()

    with httpx.Client(base_url=args.base.rstrip("/"), timeout=args.timeout) as client:
        results = [check_health(client)]
        if args.compute:
            results.append(check_compute(client))

    if args.json:
        print(json.dumps(results))
    else:
        for result in results:
            status = "OK" if result["ok"] else "FAIL"
            print(
                f"[{status}] {result['endpoint']} code={result['status_code']} "
                f"latency={result['latency_sec']}s detail={result.get('detail')}"
            )

    return 0 if all(r["ok"] for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
