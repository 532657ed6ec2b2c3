"""
FastAPI adapter: generic routers and error rendering.
"""

from crud_engine.routers.crud_router import build_crud_router
from crud_engine.routers.errors import register_exception_handlers
from crud_engine.routers.nested_router import build_composite_key_router, build_nested_router
from crud_shared.infrastructure.correlation import RequestIdMiddleware

__all__ = [
    "build_crud_router",
    "build_nested_router",
    "build_composite_key_router",
    "register_exception_handlers",
    "RequestIdMiddleware",
]
