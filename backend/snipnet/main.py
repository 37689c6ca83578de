"""
SnipNet Backend - FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers;
       uvicorn serves the module-level `app` (uvicorn snipnet.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware: Request ID → Logging → Rate Limit → GZip    │
    │              → CORS                                      │
    │                                                          │
    │  Routes:  /api/friendships  /api/social  /api/users      │
    │           /health                                        │
    │                                                          │
    │  Exception Handlers:                                     │
    │    Validation→400  Authentication→401  Forbidden→403     │
    │    NotFound→404    Conflict→409        RateLimit→429     │
    │    Database→500 (opaque)                                 │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, log the bound address
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Type

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from snipnet import __version__
from snipnet.config import settings
from snipnet.database import dispose_engine
from snipnet.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    SnipNetError,
    ValidationError,
)
from snipnet.middleware.logging import RequestLoggingMiddleware
from snipnet.middleware.rate_limit import RateLimitMiddleware
from snipnet.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from snipnet.routes import friendships, health, social, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Called once from the lifespan before anything else logs. Output goes to
    stdout so the container runtime collects it.

    Format: 2024-01-15T12:00:00 [INFO] snipnet.services.friendship_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation at DEBUG/INFO
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("SnipNet Backend %s starting up...", __version__)
    logger.info("Caller identity header: %s", settings.user_id_header)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SnipNet Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

# exception class → (HTTP status, machine-readable code, expose context as details)
_ERROR_MAP = (
    (ValidationError, 400, "validation_error", True),
    (AuthenticationError, 401, "authentication_required", False),
    (ForbiddenError, 403, "forbidden", False),
    (NotFoundError, 404, "not_found", False),
    (ConflictError, 409, "conflict", False),
)


def _error_body(code: str, message: str, details: Optional[dict] = None) -> dict:
    body = {"error": code, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map SnipNet exceptions to the JSON error envelope.

    Handler hierarchy:
        ValidationError         → 400 (details: field and context)
        AuthenticationError     → 401
        ForbiddenError          → 403
        NotFoundError           → 404
        ConflictError           → 409
        DatabaseError           → 500, generic message
        SnipNetError (base)     → 500, generic message
        Exception (fallback)    → 500, generic message, stack trace logged

    429 responses are written by RateLimitMiddleware itself, since it runs
    outside the routing layer these handlers cover.

    Security: 5xx responses never carry exception text, SQL or stack traces.
    Those stay in the server-side log, keyed by the request id.
    """

    def _client_error_handler(exc_class: Type[SnipNetError], status: int, code: str, with_details: bool):
        async def handler(request: Request, exc: SnipNetError) -> JSONResponse:
            logger.warning("[%s] %s: %s", request_id_var.get(""), exc_class.__name__, exc.message)
            return JSONResponse(
                status_code=status,
                content=_error_body(code, exc.message, exc.context if with_details else None),
            )
        return handler

    for exc_class, status, code, with_details in _ERROR_MAP:
        app.add_exception_handler(
            exc_class, _client_error_handler(exc_class, status, code, with_details)
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(SnipNetError)
    async def handle_application_error(request: Request, exc: SnipNetError):
        logger.error("[%s] Unhandled application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Middleware executes in REVERSE order of addition. Adding
    CORS → GZip → RateLimit → Logging → RequestID gives the execution order
    RequestID → Logging → RateLimit → GZip → CORS.
    """
    app = FastAPI(
        title="SnipNet API",
        description=(
            "Social features of the SnipNet code-snippet platform: friend requests, "
            "friends lists, blocking, and likes, comments and user tags on snippets and pages."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
    )
    # Friends lists and comment listings are the only payloads worth compressing
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(friendships.router)
    app.include_router(social.router)
    app.include_router(users.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
