"""
Application factory for the user service.

Run with:
    uvicorn user_service.main:create_app --factory --host 0.0.0.0 --port 8000
or via the `user-service` console script.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from user_service.api.v1 import build_router, register_exception_handlers
from user_service.config.settings import Settings, get_settings
from user_service.core.logging import RequestIDMiddleware, setup_logging
from user_service.database.base import Base
from user_service.database.session import build_engine_from_settings, build_session_factory
from user_service.utils.logging import get_project_version
import user_service.models  # noqa: F401 - registers models on Base.metadata

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    engine: AsyncEngine = app.state.engine

    if settings.DB_CREATE_ALL:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    logger.info("app.startup", extra={"env": settings.ENV, "api_prefix": settings.API_PREFIX})
    try:
        yield
    finally:
        if app.state.owns_engine:
            await engine.dispose()
        logger.info("app.shutdown")


def create_app(
    settings: Settings | None = None,
    *,
    engine: AsyncEngine | None = None,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: defaults to `get_settings()` (environment / .env).
        engine: an existing AsyncEngine to use, e.g. an in-memory SQLite engine
            in tests. When omitted one is built from settings and disposed on shutdown.
        configure_logging: apply `setup_logging(settings)`; tests that manage
            logging themselves pass False.
    """
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings)

    app = FastAPI(
        title="User Service",
        version=get_project_version(),
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.owns_engine = engine is None
    app.state.engine = engine or build_engine_from_settings(settings)
    app.state.session_factory = build_session_factory(app.state.engine)

    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)
    app.include_router(build_router(settings.API_PREFIX))

    @app.get("/health", tags=["system"])
    async def health() -> dict:
        return {"status": "ok"}

    return app


def run() -> None:
    """Console-script entry point."""
    import uvicorn

    uvicorn.run("user_service.main:create_app", factory=True, host="0.0.0.0", port=8000)
