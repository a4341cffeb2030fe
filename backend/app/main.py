"""
DocTrack Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the Database handle and the Notifier from
       Settings, stores them on app.state for the dependencies, registers
       middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn app.main:app`, or the `doctrack` console script).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Rate Limit  │→│ Req ID   │→│  Access log     │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  POST /add-student   GET /students   POST /mark-ready│
    │  DELETE /delete-student   GET /   GET /health       │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ NotFound→404 │ Email/DB→500       │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, background connect loop
    Shutdown: cancel the connect loop if still running, dispose the engine
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import Settings, settings as default_settings
from app.database import Database
from app.exceptions import (
    DatabaseError,
    DocTrackError,
    NotFoundError,
    NotificationError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import health, students
from app.services.notifier import Notifier

logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Invalid request body."


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure plain-text logging to stdout for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] app.services.student_service: message
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Report missing configuration (the server keeps running)
        3. Start the database connect loop in the background
    Shutdown:
        1. Cancel the connect loop if the database never answered
        2. Dispose the engine
    """
    app_settings: Settings = app.state.settings
    database: Database = app.state.database

    setup_logging(app_settings.log_level)
    logger.info("DocTrack Backend %s starting up...", __version__)

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    connect_task = asyncio.create_task(database.connect())

    scheme = "https" if app_settings.tls_enabled else "http"
    logger.info("Server ready at %s://%s:%d", scheme, app_settings.host, app_settings.port)

    yield

    logger.info("DocTrack Backend shutting down...")
    if not connect_task.done():
        connect_task.cancel()
        try:
            await connect_task
        except asyncio.CancelledError:
            pass
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "code": code,
            "request_id": request_id_var.get(""),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP responses.

        ValidationError          → 400
        RequestValidationError   → 400 "Invalid request body."
        NotFoundError            → 404
        NotificationError        → 500 "Email service unavailable."
        DatabaseError            → 500 generic message, context logged
        DocTrackError (base)     → 500
        Exception (fallback)     → 500, stack trace logged

    Internal details (SQL, SMTP replies, stack traces) stay in the log.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, exc.message, exc.code)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        logger.warning("[%s] Unparseable body: %s", request_id_var.get(""), exc.errors())
        return _error_response(400, INVALID_BODY_MESSAGE, ValidationError.code)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, exc.message, exc.code)

    @app.exception_handler(NotificationError)
    async def handle_notification_error(request: Request, exc: NotificationError):
        logger.error(
            "[%s] Email error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return _error_response(500, exc.message, exc.code)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return _error_response(500, exc.message, exc.code)

    @app.exception_handler(DocTrackError)
    async def handle_app_error(request: Request, exc: DocTrackError):
        logger.error(
            "[%s] Application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return _error_response(500, exc.message, exc.code)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True
        )
        return _error_response(500, "Server error", "internal_server_error")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    notifier: Optional[Notifier] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use (defaults to the environment)
        database:     Pre-built data-access handle (tests pass a SQLite one)
        notifier:     Pre-built notifier (tests pass a fake)
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="DocTrack API",
        description=(
            "Tracks student transcript and recommendation letter requests "
            "and emails students when their documents are ready."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.database = database or Database(
        app_settings.sqlalchemy_url,
        retry_interval=app_settings.db_connect_retry_interval,
        pool_size=app_settings.db_pool_size,
        max_overflow=app_settings.db_max_overflow,
        echo=app_settings.log_level == "DEBUG",
    )
    app.state.notifier = notifier or Notifier.from_settings(app_settings)

    # ── Middleware ────────────────────────────────────────────────────────
    # Executes in reverse order of addition: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window,
        message=app_settings.rate_limit_message,
        trust_proxy_hops=app_settings.trust_proxy_hops,
    )

    register_exception_handlers(app)

    app.include_router(students.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """
    Console entry point: serve the app with uvicorn.

    Serves HTTPS with the same routes when SSL_KEYFILE and SSL_CERTFILE are
    both set, plain HTTP otherwise.
    """
    import uvicorn

    options = {}
    if default_settings.tls_enabled:
        options["ssl_keyfile"] = default_settings.ssl_keyfile
        options["ssl_certfile"] = default_settings.ssl_certfile

    uvicorn.run(
        "app.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
        **options,
    )


app = create_app()
