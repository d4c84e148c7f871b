#!/usr/bin/env python3
"""
Export the Planetary Hours OpenAPI schema.

Usage:
  - From a running API:
      python tools/export_openapi.py --base http://127.0.0.1:8000 --out openapi.json

  - From local app import (requires the package installed, e.g. pip install -e .):
      python tools/export_openapi.py --local --out openapi.json
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx


def fetch_from_base(base: str) -> dict:
    resp = httpx.get(
        base.rstrip("/") + "/openapi.json",
        headers={"Accept": "application/json"},
        timeout=10.0,
    )
    resp.raise_for_status()
    return resp.json()


def build_local() -> dict:
    from apps.api.main import app

    return app.openapi()


def operation_summary(spec: dict) -> list[str]:
    """One line per operation: METHOD path operationId [tags]"""
    lines = []
    for path, methods in sorted(spec.get("paths", {}).items()):
        for method, op in methods.items():
            if isinstance(op, dict):
                tags = ",".join(op.get("tags", []))
                lines.append(f"{method.upper():6} {path} {op.get('operationId')} [{tags}]")
    return lines


def main() -> int:
    ap = argparse.ArgumentParser(description="Export Planetary Hours OpenAPI schema")
    ap.add_argument("--base", help="Base URL of a running API (e.g. http://127.0.0.1:8000)")
    ap.add_argument("--local", action="store_true", help="Build schema by importing app locally")
    ap.add_argument("--out", default="openapi.json", help="Output file path")
    ap.add_argument("--summary", action="store_true", help="Print the operation list")
    args = ap.parse_args()

    if not args.base and not args.local:
        ap.error("Provide --base or --local")

    spec = fetch_from_base(args.base) if args.base else build_local()

    out = Path(args.out)
    out.write_text(json.dumps(spec, indent=2))
    print(f"Wrote {out} ({out.stat().st_size} bytes)")
    if args.summary:
        print("\n".join(operation_summary(spec)))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
