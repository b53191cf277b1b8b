from .error_handlers import register_exception_handlers
from .users import build_router

__all__ = ["build_router", "register_exception_handlers"]
