"""
Books API — FastAPI Application Factory
========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn books_api.main:app`), `python -m books_api`, tests.
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │   Req ID     │→│   Logging    │→│    CORS     │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌─────────────────────────────┐ ┌───────────────┐  │
    │  │ /books, /books/{isbn}       │ │ GET /health   │  │
    │  └─────────────────────────────┘ └───────────────┘  │
    │                                                     │
    │  Exception Handlers (all render the envelope):      │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Database→500 │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Open the Database (engine + connection pool) and put it on app.state
    3. Create the `books` table if configured

    Shutdown:
    1. Dispose the engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from books_api import __version__
from books_api.config import Settings, settings as default_settings
from books_api.database import Database
from books_api.exceptions import BooksApiError, DatabaseError, ValidationError
from books_api.middleware.logging import RequestLoggingMiddleware
from books_api.middleware.request_id import RequestIDMiddleware, request_id_var
from books_api.routes import books, health
from books_api.services.error_formatter import format_error, format_violations

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the store at startup, close it at shutdown.

    The Database lives on `app.state.database`; request handlers reach it
    through the `get_db_session` dependency.
    """
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("Books API %s starting up...", __version__)

    database = Database(app_settings)
    app.state.database = database

    if app_settings.db_create_tables:
        await database.create_tables()

    logger.info(
        "Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port
    )

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Books API shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers.

    Handler hierarchy:
        ValidationError   → 400, violations rendered into the envelope
        DatabaseError     → 500, generic message; details logged server-side
        BooksApiError     → exc.status_code (NotFoundError 404, BadRequestError 400)
        Exception         → 500, generic message; stack trace logged

    Every response body is the error envelope built by the error formatter.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        """Body failed the book schema."""
        content = format_violations(exc.violations)
        logger.warning(
            "[%s] Validation error on %s %s: %s",
            request_id_var.get(""),
            request.method,
            request.url.path,
            content["message"],
        )
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Store failure: generic message to the client, context to the log."""
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=format_error(exc.message, status=500),
        )

    @app.exception_handler(BooksApiError)
    async def handle_app_error(request: Request, exc: BooksApiError):
        """NotFoundError, BadRequestError, and any other application error."""
        logger.info(
            "[%s] %s: %s", request_id_var.get(""), type(exc).__name__, exc.message
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=format_error(exc.message, status=exc.status_code),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all. The stack trace is logged and never sent to the client."""
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=format_error("An unexpected error occurred.", status=500),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to run with; the module singleton when omitted.
                      Tests pass their own to point at a throwaway database.

    Returns:
        Fully configured FastAPI instance. No connection is opened until the
        lifespan runs.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="Books API",
        description="CRUD API over a table of books, keyed by ISBN.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(books.router)
    app.include_router(health.router)

    return app


# uvicorn expects `books_api.main:app` to be importable
app = create_app()
