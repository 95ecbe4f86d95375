"""
mediavault.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions, media storage and the
  ingestion service.
- Encapsulate app.state access patterns (engine/sessionmaker/storage).
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mediavault.ingestion.storage import MediaStorage
from mediavault.services.ingestion import IngestionCommitter
from mediavault.settings import Settings, get_settings


def settings_dep(request: Request) -> Settings:
    # Prefer the settings the app was built with; fall back to env-driven settings.
    return getattr(request.app.state, "settings", None) or get_settings()


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # The sessionmaker is created on app startup in `mediavault.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


def storage_dep(request: Request) -> MediaStorage:
    return request.app.state.storage  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed explicitly by the service layer.
    async with session_factory() as session:
        yield session


def committer_dep(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
    storage: MediaStorage = Depends(storage_dep),
) -> IngestionCommitter:
    # Per-file commits open their own sessions from the factory.
    return IngestionCommitter(session_factory=session_factory, storage=storage)
