"""
tests.test_smoke

Minimal smoke tests to validate the service can boot and serve core endpoints.

Responsibilities:
- Ensure the FastAPI app starts, the storage layout exists and the readiness probe works.
"""

from __future__ import annotations

import httpx
import pytest

from mediavault.ingestion.storage import CATEGORY_DIRS, INCOMING_DIR, MediaStorage


@pytest.mark.asyncio
async def test_health_endpoints(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

    r = await client.get("/readyz")
    assert r.status_code == 200
    assert r.json()["status"] == "ready"


@pytest.mark.asyncio
async def test_startup_creates_storage_layout(storage: MediaStorage) -> None:
    for name in {*CATEGORY_DIRS.values(), INCOMING_DIR}:
        assert (storage.root / name).is_dir()


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz", headers={"x-request-id": "req-123"})
    assert r.headers["x-request-id"] == "req-123"

    r = await client.get("/healthz")
    assert r.headers["x-request-id"]


@pytest.mark.asyncio
async def test_unknown_route_uses_failure_envelope(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/nope")
    assert r.status_code == 404
    body = r.json()
    assert body["statusCode"] == 404
    assert body["path"] == "/api/nope"
    assert "timestamp" in body
