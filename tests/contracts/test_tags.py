from __future__ import annotations

from fastapi.testclient import TestClient
from apps.api.main import app


client = TestClient(app)


def test_tags_are_normalized():
    r = client.get("/openapi.json")
    spec = r.json()
    allowed = {
        "planetary-hours",
        "health",
        "reference",
    }
    for path, methods in spec.get("paths", {}).items():
        for method, op in methods.items():
            if not isinstance(op, dict):
                continue
            tags = set(op.get("tags", []))
            assert tags, f"Missing tags for {path} {method}"
            assert tags <= allowed, f"Unexpected tags {tags - allowed} on {path} {method}"
