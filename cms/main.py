"""FastAPI application entry point."""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cms import __version__
from cms.api.health import router as health_router
from cms.api.items import router as items_router
from cms.config import Settings
from cms.exceptions import (
    DuplicateItemError,
    ItemError,
    ItemNotFoundError,
    StoreReadError,
    StoreWriteError,
    VersionConflictError,
)
from cms.log_config import configure_logging
from cms.services.config_service import ConfigService
from cms.store import open_store

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan: startup and shutdown."""
    settings: Settings = app.state.settings
    configure_logging(settings.debug)
    settings.validate_storage()
    logger.info(
        "Starting CMS backend (storage=%s, debug=%s)", settings.storage_backend, settings.debug
    )

    try:
        store = await open_store(settings)
    except Exception as exc:
        logger.critical("Failed to initialize config store: %s", exc)
        raise
    app.state.config_service = ConfigService(store, max_retries=settings.max_write_retries)

    yield

    try:
        await store.close()
    except Exception as exc:
        logger.error("Error during config store shutdown: %s", exc, exc_info=True)

    logger.info("CMS backend stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="CMS Config Backend",
        description="Pages and sidebar entries stored as a single config document",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(items_router)

    # Global exception handlers

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = []
        for err in exc.errors():
            loc = err.get("loc", ())
            field = str(loc[-1]) if loc else "unknown"
            errors.append({"field": field, "message": err.get("msg", "Invalid value")})
        logger.warning(
            "RequestValidationError in %s %s: %s",
            request.method,
            request.url.path,
            errors,
        )
        return JSONResponse(status_code=400, content={"detail": errors})

    @app.exception_handler(ItemError)
    async def item_error_handler(request: Request, exc: ItemError) -> JSONResponse:
        if isinstance(exc, DuplicateItemError):
            status_code = 409
        elif isinstance(exc, ItemNotFoundError):
            status_code = 404
        else:
            status_code = 400
        logger.info("%s in %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.exception_handler(VersionConflictError)
    async def version_conflict_handler(
        request: Request, exc: VersionConflictError
    ) -> JSONResponse:
        logger.warning("VersionConflictError in %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=409,
            content={"detail": f"Failed to update config in database: {exc}"},
        )

    @app.exception_handler(StoreReadError)
    async def store_read_error_handler(request: Request, exc: StoreReadError) -> JSONResponse:
        logger.error("StoreReadError in %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={"detail": f"Failed to load config from database: {exc}"},
        )

    @app.exception_handler(StoreWriteError)
    async def store_write_error_handler(request: Request, exc: StoreWriteError) -> JSONResponse:
        logger.error("StoreWriteError in %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={"detail": f"Failed to update config in database: {exc}"},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled %s in %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


app = create_app()


def cli_entry() -> None:
    """CLI entry point for running the server."""
    import uvicorn

    settings: Settings = app.state.settings
    try:
        settings.validate_storage()
    except ValueError as exc:
        configure_logging(settings.debug)
        logger.critical("%s", exc)
        sys.exit(1)

    uvicorn.run(
        "cms.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
