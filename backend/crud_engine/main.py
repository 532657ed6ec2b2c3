"""
Application factory for services built on the engine.

    app = create_app(
        build_crud_router("/api/books", book_service, book_mapper, BookRequest, BookOutput),
        title="Library API",
    )
"""

from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from crud_engine.routers.errors import register_exception_handlers
from crud_shared.config.logging import router_logger as logger, setup_logging
from crud_shared.config.settings import settings
from crud_shared.infrastructure.correlation import RequestIdMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    setup_logging()

    config_errors = settings.validate_production()
    if config_errors:
        for error in config_errors:
            logger.error("Configuration error: %s", error)
        if settings.environment == "production":
            raise RuntimeError(f"Production configuration errors: {'; '.join(config_errors)}")

    logger.info("Starting application", title=app.title, env=settings.environment)
    yield
    logger.info("Shutting down application", title=app.title)


def create_app(*routers: APIRouter, title: str = "CRUD API", version: str = "0.1.0") -> FastAPI:
    """
    Build a FastAPI application with request correlation, the engine's
    exception handlers and the given routers.
    """
    app = FastAPI(title=title, version=version, debug=settings.debug, lifespan=lifespan)
    app.add_middleware(RequestIdMiddleware)
    register_exception_handlers(app)

    for router in routers:
        app.include_router(router)

    @app.get("/api/health")
    def health_check() -> dict[str, str]:
        return {"status": "ok", "environment": settings.environment}

    return app
