from .base import Base
from .session import (
    build_engine,
    build_engine_from_settings,
    build_session_factory,
    get_async_session,
)

__all__ = [
    "Base",
    "build_engine",
    "build_engine_from_settings",
    "build_session_factory",
    "get_async_session",
]
