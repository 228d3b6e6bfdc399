"""
Checkstate: FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the Settings (unless given), the CheckStore, the
       middleware chain, the exception handlers and the routes.
Who:   uvicorn (`uvicorn checkstate.main:app`), run() below, and the tests,
       which call create_app() with their own Settings.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │ Req ID   │→│  Logging        │→│ CORS (opt.)  │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌─────────────┐ ┌──────────────┐  │
    │  │ /api/states  │ │ /api/state  │ │ GET /health  │  │
    │  └──────────────┘ └─────────────┘ └──────────────┘  │
    │  [ static page at "/" when static_dir is set ]      │
    │                                                     │
    │  Exception Handlers (plain-text bodies):            │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ ValidationError→400 │ StorageError→500 │ *→500│  │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create the storage root (fatal on failure)
    Shutdown: log only; there are no pooled resources to release
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from checkstate import __version__
from checkstate.config import Settings
from checkstate.exceptions import StorageError, ValidationError
from checkstate.middleware.logging import RequestLoggingMiddleware
from checkstate.middleware.request_id import RequestIDMiddleware, request_id_var
from checkstate.routes import health, states
from checkstate.services.state_store import CheckStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure process-wide logging to stdout.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # uvicorn's own access log duplicates RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup creates the storage root. A failure there is re-raised, which
    makes uvicorn abort startup and exit.
    """
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    logger.info("Checkstate %s starting up...", __version__)

    try:
        await app.state.store.ensure_root()
    except StorageError as e:
        logger.error("Failed to create data directory: %s", e.context.get("os_error", e.message))
        raise

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)

    yield

    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to plain-text responses.

        ValidationError  → 400, body = exc.message
        StorageError     → 500, body = exc.message (OS detail logged only)
        Exception        → 500, "Internal Server Error" (stack trace logged)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return PlainTextResponse("Internal Server Error", status_code=500)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to use. Built from the environment when None.

    Returns:
        A configured FastAPI instance with its own CheckStore on app.state.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="Checkstate API",
        description="Persists checkbox state of markdown documents as marker files.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = CheckStore(settings.data_dir)

    # Last added executes first: RequestID → Logging → CORS
    if settings.cors_origins_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins_list,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID"],
        )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(states.router)
    app.include_router(health.router)

    # Mounted last so "/" does not shadow the API routes
    if settings.static_dir:
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app


def run(settings: Optional[Settings] = None) -> None:
    """
    Process entry point: create the storage root, then serve until stopped.

    Exits with status 1 if the storage root cannot be created. uvicorn itself
    logs and exits when the listen address cannot be bound.
    """
    settings = settings or Settings()
    setup_logging(settings.log_level)

    app = create_app(settings)
    try:
        asyncio.run(app.state.store.ensure_root())
    except StorageError as e:
        logger.error("Failed to create data directory: %s", e.context.get("os_error", e.message))
        sys.exit(1)

    logger.info("Server starting on %s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


app = create_app()
