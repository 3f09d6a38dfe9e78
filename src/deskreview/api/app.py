"""FastAPI application with lifespan, error mapping and router mounting."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from deskreview.api.routes import decisions, escalations, examples, health, reviews
from deskreview.core.config import AppSettings
from deskreview.core.exceptions import (
    AlreadyReviewedError,
    ExampleNotFoundError,
    ReviewNotFoundError,
    StoreError,
    ValidationError,
)
from deskreview.core.logging import configure_logging
from deskreview.services.container import ServiceContainer, build_services

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize and tear down application resources."""
    services: ServiceContainer | None = app.state.services
    settings = services.settings if services is not None else AppSettings()
    configure_logging(settings.log_level, json_output=settings.log_json)
    if services is None:
        app.state.services = build_services(settings)
    app.state.settings = settings
    logger.info("deskreview API started", extra={"environment": settings.environment})
    yield


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def _already_reviewed(request: Request, exc: AlreadyReviewedError) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "status": str(exc.status), "reviewed_by": exc.reviewed_by},
    )


async def _not_found(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def _store_error(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Backend failure", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(status_code=503, content={"detail": "storage backend unavailable"})


def create_app(services: ServiceContainer | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``services`` is built from ``AppSettings`` at startup when not supplied.
    """
    app = FastAPI(
        title="deskreview",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = services
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(AlreadyReviewedError, _already_reviewed)
    app.add_exception_handler(ReviewNotFoundError, _not_found)
    app.add_exception_handler(ExampleNotFoundError, _not_found)
    app.add_exception_handler(StoreError, _store_error)

    app.include_router(health.router)
    app.include_router(decisions.router)
    app.include_router(reviews.router, prefix="/reviews")
    app.include_router(examples.router, prefix="/examples")
    app.include_router(escalations.router, prefix="/escalations")
    return app
