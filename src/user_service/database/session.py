from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)
from sqlalchemy.pool import StaticPool

from user_service.config.settings import Settings


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """
    Create the AsyncEngine for `database_url`.

    In-memory SQLite gets a StaticPool so every session shares the one connection
    (otherwise each connection would see its own empty database).
    """
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        return create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_async_engine(
        database_url,
        echo=echo,               # Set to False in production
        pool_pre_ping=True,      # Enables connection health checks
    )


def build_engine_from_settings(settings: Settings) -> AsyncEngine:
    return build_engine(settings.DATABASE_URL, echo=settings.SQLALCHEMY_ECHO)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # `async_sessionmaker` returns an async session factory.
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# Dependency to get DB session
async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency. Yields a session and ensures it's closed after the request.

    The session factory is built once in `create_app()` and stored on `app.state`.

    Usage:
        async def endpoint(db: AsyncSession = Depends(get_async_session)):
            await db.execute(...)
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        yield session
