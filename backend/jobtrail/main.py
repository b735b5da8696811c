"""
JobTrail Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds the app, attaches a ServiceContext, and
       registers middleware, exception handlers and routers. The module-level
       `app` serves uvicorn (uvicorn jobtrail.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌──────┐        │
    │  │  Req ID  │→│ Logging  │→│ GZip │→│ CORS │        │
    │  └──────────┘ └──────────┘ └──────┘ └──────┘        │
    │                                                     │
    │  Routes:                                            │
    │  /api/sync  /api/resume-sync  /api/applications     │
    │  /api/register  /api/login  /api/auth  /health      │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ Unauthorized→401 │ NotFound→404   │
    │  RateLimit→429  │ StoreUnavailable→503 │ DB→500     │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (cloud mode needs a PostgreSQL URL)
    3. Start the ServiceContext (engine, readiness probe, schema)

    Shutdown:
    1. Close the ServiceContext (dispose the engine)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from jobtrail import __version__
from jobtrail.config import Settings, get_settings
from jobtrail.context import ServiceContext
from jobtrail.exceptions import (
    DatabaseError,
    JobTrailError,
    MalformedRequestError,
    NotFoundError,
    RateLimitExceededError,
    StoreUnavailableError,
    UnauthorizedError,
    ValidationError,
)
from jobtrail.middleware.logging import RequestLoggingMiddleware
from jobtrail.middleware.request_id import RequestIDMiddleware, request_id_var
from jobtrail.routes import applications, auth, health, resumes, sync

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout
    (container runtimes collect stdout). Chatty third-party loggers are
    raised to WARNING.
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
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Starts the ServiceContext before the first request and closes it after
    the last one.

    An invalid configuration or an unreachable store aborts startup: the
    server would otherwise answer every request with 503.
    """
    context: ServiceContext = app.state.context
    settings = context.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("JobTrail Backend %s starting up (storage=%s)...", __version__, settings.storage_mode)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise

    await context.start()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("JobTrail Backend shutting down...")
    await context.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error(status_code: int, error: str, message: str, details=None, headers=None) -> JSONResponse:
    content = {"error": error, "message": message}
    if details:
        content["details"] = details
    content["request_id"] = request_id_var.get("")
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps application exceptions to JSON error responses.

    Handler hierarchy:
        ValidationError          → 400 validation_error
        MalformedRequestError    → 400 malformed_request
        RequestValidationError   → 400 malformed_request (body/query shape)
        UnauthorizedError        → 401 unauthorized
        NotFoundError            → 404 not_found
        RateLimitExceededError   → 429 rate_limit_exceeded + Retry-After
        StoreUnavailableError    → 503 store_unavailable + Retry-After
        DatabaseError            → 500 server_error
        JobTrailError (base)     → 500 server_error
        Exception (fallback)     → 500 internal_server_error

    Responses never contain stack traces or SQL; those go to the log.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        """Client sent a value that breaks a rule; the message says which."""
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        details = {"field": exc.field} if exc.field else None
        return _error(400, "validation_error", exc.message, details)

    @app.exception_handler(MalformedRequestError)
    async def handle_malformed_request(request: Request, exc: MalformedRequestError):
        logger.warning("[%s] Malformed request: %s", request_id_var.get(""), exc.message)
        return _error(400, "malformed_request", exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """FastAPI could not bind the body or query parameters."""
        errors = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), errors)
        return _error(
            400,
            "malformed_request",
            "The request body or parameters are malformed",
            {"errors": errors},
        )

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return _error(401, "unauthorized", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error(404, "not_found", exc.message)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        """Tell the client when it may try again."""
        return _error(
            429,
            "rate_limit_exceeded",
            exc.message,
            {"retry_after": exc.retry_after},
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_unavailable(request: Request, exc: StoreUnavailableError):
        logger.error("[%s] Store unavailable: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error(
            503,
            "store_unavailable",
            exc.message,
            {"retry_after": exc.retry_after},
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Generic message to the client; context stays in the log."""
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(JobTrailError)
    async def handle_app_error(request: Request, exc: JobTrailError):
        logger.error("[%s] Unhandled application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: the stack trace is logged, never returned."""
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _error(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to use; defaults to the process environment.
            Tests pass their own (e.g. a temporary SQLite file).
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="JobTrail API",
        description=(
            "Job application tracker with offline-first sync. Devices push "
            "changed records and pull the merged result; conflicts resolve by "
            "last-write-wins on updatedAt."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.context = ServiceContext(settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(sync.router)
    app.include_router(resumes.router)
    app.include_router(applications.router)
    app.include_router(auth.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
