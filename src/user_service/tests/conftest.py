"""
Core pytest configuration for the test suite.

Provides the pieces every test group needs: quiet third-party loggers, the
application logging config, and a fresh in-memory SQLite database per test.

Domain-specific fixtures live in:
- tests/test_fixtures/repository_fixtures.py
- tests/test_fixtures/api_fixtures.py
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator

# Set noisy third-party loggers before importing modules that might log at import time.
NOISY_LOGGERS = (
    "faker",
    "faker.factory",
    "sqlalchemy",
    "sqlalchemy.engine",
    "aiosqlite",
    "asyncio",
    "httpx",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from user_service.config.settings import Settings
from user_service.core.logging.builder import setup_logging
from user_service.database.base import Base
from user_service.database.session import build_engine, build_session_factory
import user_service.models  # noqa: F401 - registers models on Base.metadata

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_test_settings(**overrides) -> Settings:
    """Settings that ignore the developer's .env file."""
    values = {
        "ENV": "testing",
        "DATABASE_URL_OVERRIDE": TEST_DATABASE_URL,
        "LOG_LEVEL": "INFO",
        "LOG_FORMAT": "text",
        "LOG_TO_STDOUT": True,
        "DB_CREATE_ALL": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return make_test_settings()


@pytest.fixture(scope="session", autouse=True)
def configure_logging(test_settings: Settings):
    """
    Install the application's logging config once for the whole session, so
    formatters and filters behave the same way they do in the running service.
    """
    setup_logging(test_settings)
    yield


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------


@pytest.fixture()
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    A brand-new in-memory database per test; tables are created up front
    and everything disappears with the engine.
    """
    engine = build_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture()
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    maker = build_session_factory(async_engine)
    async with maker() as session:
        yield session


# Domain fixtures, registered globally
from .test_fixtures.repository_fixtures import (  # noqa: E402
    user_repository,
    user_service,
    sample_user_data,
    create_user,
    created_user,
    multiple_users,
)
from .test_fixtures.api_fixtures import (  # noqa: E402
    app,
    client,
    post_user,
)
