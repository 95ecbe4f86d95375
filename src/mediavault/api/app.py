"""
mediavault.api.app

FastAPI app factory for the Media Vault service.

Responsibilities:
- Build the FastAPI application and register routers, middleware and error handlers.
- Initialize and dispose shared infrastructure (DB engine/session factory, storage layout).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from fastapi import FastAPI

from mediavault import __version__
from mediavault.api.errors import register_error_handlers
from mediavault.api.routers.dev_auth import router as dev_auth_router
from mediavault.api.routers.health import router as health_router
from mediavault.api.routers.media import router as media_router
from mediavault.api.routers.tags import router as tags_router
from mediavault.api.routers.users import router as users_router
from mediavault.db.init_db import init_db
from mediavault.db.session import create_engine, create_sessionmaker
from mediavault.ingestion.storage import MediaStorage
from mediavault.observability.logging import configure_logging, get_logger
from mediavault.observability.middleware import RequestContextMiddleware
from mediavault.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.log_json,
    )

    app = FastAPI(
        title="Media Vault",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings
    app.state.storage = MediaStorage(settings.storage_root)

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)

    app.include_router(health_router, tags=["health"])
    for router in (dev_auth_router, users_router, tags_router, media_router):
        app.include_router(router, prefix=settings.api_prefix)

    @app.on_event("startup")
    async def _startup() -> None:
        log.info("startup", env=settings.env, storage_root=str(app.state.storage.root))
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        app.state.storage.ensure_layout()
        if settings.env in ("dev", "test"):
            # Prod schema is managed by Alembic.
            await init_db(engine)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        engine = getattr(app.state, "engine", None)
        if engine is not None:
            await engine.dispose()
        log.info("shutdown")

    return app


# --- Module Notes -----------------------------------------------------------
# Composition only: request handling lives in routers, persistence and file
# placement in services/ingestion.
