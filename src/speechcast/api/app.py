"""
Speechcast FastAPI Application

Main application factory and configuration.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from speechcast import __version__
from speechcast.auth.guard import AuthGuard
from speechcast.config import Settings, get_settings
from speechcast.content.provider import ContentProvider
from speechcast.core.errors import ContentLoadError, GatewayRejection
from speechcast.presentation.state import PresentationStateMachine
from speechcast.realtime.broadcaster import PresentationBroadcaster
from speechcast.realtime.connection import ChannelRegistry

from .routes import health, realtime, speech

logger = structlog.get_logger()


# ══════════════════════════════════════════════════════════════
# Lifespan Management
# ══════════════════════════════════════════════════════════════


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings: Settings = app.state.settings

    # Startup
    logger.info(
        "Starting Speechcast",
        version=__version__,
        environment=settings.app_env,
        content_file=str(app.state.content.path),
    )

    try:
        catalog = await app.state.content.load()
        logger.info(
            "Speech content loaded",
            languages=catalog.languages,
            sections=catalog.section_count,
        )
    except ContentLoadError as e:
        logger.error("Speech content unavailable", error=str(e))

    await app.state.guard.start(settings.auth_prune_interval_seconds)

    logger.info("Speechcast started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Speechcast")

    await app.state.guard.stop()

    for connection in app.state.registry.connections():
        await app.state.registry.disconnect(connection)

    logger.info("Speechcast shutdown complete")


# ══════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Raises:
        ConfigurationError: if no settings are given and the environment
            lacks required values such as the presenter password.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Speechcast API",
        description="Live presentation broadcasting with per-language sections",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # ──────────────────────────────────────────────────────────
    # Components
    # ──────────────────────────────────────────────────────────

    machine = PresentationStateMachine()
    registry = ChannelRegistry()

    app.state.settings = settings
    app.state.content = ContentProvider(settings.content_file)
    app.state.machine = machine
    app.state.guard = AuthGuard(
        settings.presenter_password.get_secret_value(),
        max_attempts=settings.auth_max_attempts,
        window_seconds=settings.auth_window_seconds,
    )
    app.state.registry = registry
    app.state.broadcaster = PresentationBroadcaster(registry, machine)

    # ──────────────────────────────────────────────────────────
    # Middleware
    # ──────────────────────────────────────────────────────────

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Request logging
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests with timing."""
        start = time.perf_counter()

        response = await call_next(request)

        duration = (time.perf_counter() - start) * 1000
        logger.info(
            "Request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round(duration, 2),
        )

        return response

    # ──────────────────────────────────────────────────────────
    # Error Handlers
    # ──────────────────────────────────────────────────────────

    @app.exception_handler(GatewayRejection)
    async def handle_rejection(request: Request, exc: GatewayRejection) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.message},
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        logger.info("Malformed request", path=request.url.path, errors=len(exc.errors()))
        return ORJSONResponse(
            status_code=400,
            content={"success": False, "error": "Malformed request"},
        )

    # ──────────────────────────────────────────────────────────
    # Routes
    # ──────────────────────────────────────────────────────────

    # Health checks (no auth required)
    app.include_router(
        health.router,
        tags=["Health"],
    )

    app.include_router(
        speech.router,
        prefix=settings.api_prefix,
        tags=["Speech"],
    )

    # WebSocket routes
    app.include_router(
        realtime.router,
        prefix=settings.base_path,
        tags=["Realtime"],
    )

    return app
