"""
Kavin's Catalog Backend — FastAPI Application Factory
=======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       uvicorn serves the module-level `app` (uvicorn app.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware: Rate Limit → Request ID → Logging → GZip    │
    │              → CORS                                      │
    │                                                          │
    │  Routes: /api/catalog  /api/products  /api/auth          │
    │          /api/admin/products  /api/admin/users  /health  │
    │                                                          │
    │  Exception Handlers:                                     │
    │    Validation→400  Auth→401  Permission→403  NotFound→404│
    │    Offline→409  RateLimit→429  DB/Storage→500  AI/BaaS→503│
    └──────────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import dispose_engine
from app.exceptions import (
    AccountConfirmationRequiredError,
    AuthenticationError,
    CatalogError,
    CircuitBreakerOpenError,
    DatabaseError,
    ExternalServiceError,
    FileStorageError,
    LLMServiceError,
    NotFoundError,
    OfflineModeAvailableError,
    PermissionDeniedError,
    RateLimitExceededError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import auth, catalog, health, products, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, at startup.

    Format: 2024-01-15T12:00:00 [INFO] app.services.auth_service: message
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("hpack").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Kavin's Catalog Backend %s starting up...", __version__)

    # Missing credentials are reported, not fatal: the catalog still serves
    # demo data and offline logins without them
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    if settings.offline_fallback_enabled:
        logger.info("Offline login fallback enabled (sessions last %ds)", settings.offline_session_ttl)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Kavin's Catalog Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    content = {
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the CatalogError hierarchy to HTTP responses.

    Handler hierarchy:
        ValidationError                    → 400
        AuthenticationError                → 401
        PermissionDeniedError              → 403
        AccountConfirmationRequiredError   → 403
        NotFoundError                      → 404
        OfflineModeAvailableError          → 409
        RateLimitExceededError             → 429
        DatabaseError / FileStorageError   → 500
        LLMServiceError / CircuitBreakerOpenError / ExternalServiceError → 503
        CatalogError (base) / Exception    → 500

    Database and unexpected errors never expose their context; it is logged.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(
            401,
            "authentication_required",
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(PermissionDeniedError)
    async def handle_permission_denied(request: Request, exc: PermissionDeniedError):
        logger.warning("[%s] Permission denied: %s", request_id_var.get(""), exc.message)
        return _error_response(403, "permission_denied", exc.message, exc.context)

    @app.exception_handler(AccountConfirmationRequiredError)
    async def handle_confirmation_required(request: Request, exc: AccountConfirmationRequiredError):
        return _error_response(403, "email_not_confirmed", exc.message, {"email": exc.email})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(OfflineModeAvailableError)
    async def handle_offline_available(request: Request, exc: OfflineModeAvailableError):
        logger.info("[%s] Offline mode offered to %s", request_id_var.get(""), exc.email)
        return _error_response(409, "offline_mode_available", exc.message, exc.context)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return _error_response(
            429,
            "rate_limit_exceeded",
            exc.message,
            {"retry_after": exc.retry_after},
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(CircuitBreakerOpenError)
    async def handle_circuit_breaker(request: Request, exc: CircuitBreakerOpenError):
        logger.warning("[%s] Circuit breaker open: %s", request_id_var.get(""), exc.message)
        return _error_response(
            503,
            "service_unavailable",
            exc.message,
            {"recovery_time": exc.recovery_time},
            headers={"Retry-After": str(exc.recovery_time)},
        )

    @app.exception_handler(LLMServiceError)
    async def handle_llm_error(request: Request, exc: LLMServiceError):
        logger.error("[%s] LLM service error: %s", request_id_var.get(""), exc.message)
        headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
        return _error_response(503, "llm_service_error", exc.message, exc.context, headers=headers)

    @app.exception_handler(ExternalServiceError)
    async def handle_external_service_error(request: Request, exc: ExternalServiceError):
        logger.error(
            "[%s] External service error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(503, "service_unavailable", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(
            500,
            "server_error",
            "An internal error occurred. Please try again later.",
        )

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error(
            "[%s] File storage error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(CatalogError)
    async def handle_catalog_error(request: Request, exc: CatalogError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Kavin's Catalog API",
        description=(
            "B2B fashion catalog: role-based pricing for representatives and "
            "sacoleiras, a multi-variant product editor with AI descriptions, "
            "and user management."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "X-Total-Count",
            "Retry-After",
        ],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(catalog.router)
    app.include_router(auth.router)
    app.include_router(products.router)
    app.include_router(users.router)
    app.include_router(health.router)

    return app


app = create_app()
