"""
mediavault.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) with DB connectivity and storage root checks.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.api.deps import db_session, storage_dep
from mediavault.ingestion.storage import MediaStorage

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(
    session: AsyncSession = Depends(db_session),
    storage: MediaStorage = Depends(storage_dep),
) -> dict[str, str]:
    await session.execute(text("SELECT 1"))
    if not storage.root.is_dir():
        return {"status": "storage_unavailable"}
    return {"status": "ready"}


# --- Module Notes -----------------------------------------------------------
# Probes are served outside the `/api` prefix and without the response envelope.
