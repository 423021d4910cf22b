"""
TourAvels Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, exception handling
       and the store's connection lifecycle in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance that
       owns one MongoStore on app.state.store.
Who:   Called by uvicorn (uvicorn touravels.main:app) or the `touravels` command.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware: Request ID → Logging → GZip → CORS     │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ /touristsSpot│ │ /tourPlans   │ │ /health, /  │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  Exception Handlers: TouravelsError→500 │ other→500 │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Presence-check credentials, connect the store
    3. On failure: abort (default) or continue degraded, per
       DB_ABORT_ON_CONNECT_FAILURE

    Shutdown:
    1. Close the MongoDB client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from touravels import __version__
from touravels.config import settings
from touravels.database import MongoStore
from touravels.exceptions import StoreConnectionError, TouravelsError
from touravels.middleware.logging import RequestLoggingMiddleware
from touravels.middleware.request_id import RequestIDMiddleware, request_id_var
from touravels.routes import health, plans, spots

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout
    (the hosting platform captures stdout).
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Connect the store on startup and close it on shutdown.

    Failure policy (DB_ABORT_ON_CONNECT_FAILURE):
        true  → re-raise StoreConnectionError; uvicorn exits non-zero so the
                platform marks the deploy as failed
        false → log and serve anyway; requests return 500 and /health keeps
                trying to reconnect
    """
    setup_logging()
    store: MongoStore = app.state.store
    store_settings = store.settings
    logger.info("=" * 60)
    logger.info("TourAvels Backend %s starting up...", __version__)

    try:
        try:
            store_settings.validate_required()
        except ValueError as e:
            raise StoreConnectionError(
                message="MongoDB configuration invalid",
                context={"error": str(e)},
            ) from e
        await store.connect()
    except StoreConnectionError as e:
        if store_settings.db_abort_on_connect_failure:
            logger.critical("Startup aborted, database unavailable: %s", e.detail)
            raise
        logger.error(
            "Database unavailable, continuing without it (requests will fail): %s",
            e.detail,
        )

    logger.info("Server ready on port %d", store_settings.port)
    logger.info("=" * 60)

    yield

    logger.info("TourAvels Backend shutting down...")
    await store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every failure to HTTP 500 with a free-text message.

    Handler hierarchy:
        TouravelsError (not connected, bad id, store failure) → 500, detail included
        Exception (unexpected)                                 → 500, generic message
    """

    @app.exception_handler(TouravelsError)
    async def handle_app_error(request: Request, exc: TouravelsError):
        rid = request_id_var.get("")
        logger.error(
            "[%s] %s %s failed: %s | Context: %s",
            rid,
            request.method,
            request.url.path,
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content={
                "message": exc.message,
                "error": exc.detail,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace is logged server-side only."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "message": "Server error",
                "error": type(exc).__name__,
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(store: Optional[MongoStore] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        store: Connection manager to own. Defaults to a MongoStore built
               from the global settings; tests pass a substitute.
    """
    app = FastAPI(
        title="TourAvels API",
        description="CRUD API for tourist spots and user tour plans.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.store = store or MongoStore(settings)
    allowed_origins = app.state.store.settings.cors_origins_list

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added = outermost)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Spot lists can get large; small responses are not worth compressing
    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(RequestLoggingMiddleware, allowed_origins=allowed_origins)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(spots.router)
    app.include_router(plans.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `touravels.main:app` to be importable; no I/O happens here
app = create_app()


def run() -> None:
    """Entry point for the `touravels` command: serve on HOST:PORT."""
    uvicorn.run(
        "touravels.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
