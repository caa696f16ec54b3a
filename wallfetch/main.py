"""FastAPI application entry point with lifespan management.

Startup: load settings, configure logging, build the picture service (endpoint
registry, health tracker, rate governor, executor, pipeline, orchestrator) and
start the background health prober.
Shutdown: graceful drain — stop the prober, wait for in-flight fetches up to
``graceful_shutdown_seconds``, cancel whatever is left, close the transport.

Run with: ``uvicorn wallfetch.main:app``
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from wallfetch.config.settings import WallfetchSettings
from wallfetch.logging_config import configure_logging
from wallfetch.middleware.error_handler import register_error_handlers
from wallfetch.middleware.request_id import RequestIdMiddleware
from wallfetch.routers.endpoints import create_endpoints_router
from wallfetch.routers.health import create_health_router
from wallfetch.routers.pictures import create_pictures_router
from wallfetch.services.picture_service import PictureService

logger = logging.getLogger(__name__)

# Shared state for the application, populated during lifespan startup
_state: dict = {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown logic."""
    settings: WallfetchSettings = app.state.settings

    configure_logging(settings.log_level)
    logger.info("Starting wallfetch service")

    picture_service = PictureService.from_settings(settings)
    picture_service.start()

    app.include_router(create_health_router(picture_service=picture_service))
    app.include_router(
        create_pictures_router(
            picture_service=picture_service,
            default_count=settings.default_pic_count,
        )
    )
    app.include_router(create_endpoints_router(picture_service=picture_service))

    _state.update({
        "settings": settings,
        "picture_service": picture_service,
    })

    logger.info(
        "Wallfetch service started with %d endpoints", len(picture_service.registry)
    )

    yield

    # --- Shutdown ---
    logger.info("Shutting down wallfetch service…")
    await picture_service.shutdown(timeout=settings.graceful_shutdown_seconds)
    _state.clear()
    logger.info("Wallfetch service shut down")


def create_app(settings: WallfetchSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Settings are loaded eagerly so that an invalid ``WALLFETCH_*`` variable
    fails at import time rather than on the first request.
    """
    settings = settings or WallfetchSettings()

    app = FastAPI(
        title="Wallfetch",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestIdMiddleware)
    register_error_handlers(app)

    return app


app = create_app()
