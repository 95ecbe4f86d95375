"""
tests.conftest

Shared fixtures: an app per test backed by a temporary SQLite file and storage root.

Responsibilities:
- Build settings pointing at tmp_path (env=test so tables are auto-created).
- Run app startup/shutdown explicitly (httpx ASGITransport does not manage lifespan).
- Provide helpers to seed users and mint bearer tokens.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from mediavault.api.app import create_app
from mediavault.auth.jwt import JwtConfig, issue_token
from mediavault.db.models import Role, UserStatus
from mediavault.db.repositories.users import UserRepo
from mediavault.ingestion.storage import MediaStorage
from mediavault.services.ingestion import IngestionCommitter
from mediavault.settings import Settings


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        env="test",
        log_level="WARNING",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'mediavault.db'}",
        storage_root=str(tmp_path / "uploads"),
        jwt_secret="test-secret",
    )


@asynccontextmanager
async def _serve(settings: Settings) -> AsyncIterator[tuple[FastAPI, httpx.AsyncClient]]:
    app = create_app(settings=settings)
    await app.router.startup()
    try:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield app, client
    finally:
        await app.router.shutdown()


@pytest_asyncio.fixture
async def served(settings: Settings) -> AsyncIterator[tuple[FastAPI, httpx.AsyncClient]]:
    async with _serve(settings) as pair:
        yield pair


@pytest.fixture
def app(served: tuple[FastAPI, httpx.AsyncClient]) -> FastAPI:
    return served[0]


@pytest.fixture
def client(served: tuple[FastAPI, httpx.AsyncClient]) -> httpx.AsyncClient:
    return served[1]


@pytest.fixture
def serve(settings: Settings):
    """
    Start a second app over the same database/storage with some settings overridden.
    """

    def _factory(**overrides):
        return _serve(settings.model_copy(update=overrides))

    return _factory


@pytest.fixture
def storage(app: FastAPI) -> MediaStorage:
    return app.state.storage


@pytest.fixture
def committer(app: FastAPI, storage: MediaStorage) -> IngestionCommitter:
    return IngestionCommitter(session_factory=app.state.sessionmaker, storage=storage)


@pytest.fixture
def create_user(app: FastAPI) -> Callable[..., Awaitable[int]]:
    async def _create(
        email: str,
        *,
        role: Role | None = Role.user,
        status: UserStatus = UserStatus.active,
    ) -> int:
        async with app.state.sessionmaker() as session:
            user = await UserRepo(session).create(email=email, role=role, status=status)
            await session.commit()
            return user.id

    return _create


@pytest.fixture
def bearer(settings: Settings) -> Callable[..., dict[str, str]]:
    cfg = JwtConfig.from_settings(settings)

    def _headers(user_id: int, *, role: str | None = None, ttl: timedelta = timedelta(minutes=5)):
        token = issue_token(cfg=cfg, subject=str(user_id), role=role, ttl=ttl)
        return {"Authorization": f"Bearer {token}"}

    return _headers


# --- Module Notes -----------------------------------------------------------
# Each test gets its own tmp_path, so database rows and stored files never leak
# between tests.
