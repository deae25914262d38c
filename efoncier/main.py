"""
e-Foncier Backend: FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers;
       `lifespan` prepares the database and the document store.
Who:   uvicorn (`uvicorn efoncier.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌────────────┐ ┌──────────┐ ┌────────────┐ ┌─────────┐  │
    │  │ Rate Limit │→│ Req ID   │→│ Access log │→│GZip/CORS│  │
    │  └────────────┘ └──────────┘ └────────────┘ └─────────┘  │
    │                                                          │
    │  Routes (/api):                                          │
    │  parcels · history · notes · documents · requests        │
    │  stats · seed                       + /health            │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ┌────────────────────────────────────────────────────┐  │
    │  │ Validation→400 │ NotFound→404 │ Conflict→409       │  │
    │  │ RateLimit→429  │ Storage/DB/anything else→500      │  │
    │  └────────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Create missing tables and columns (when DB_AUTO_MIGRATE is on)
    3. Create the storage directory
    Shutdown:
    1. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from efoncier import __version__
from efoncier.config import settings
from efoncier.database import dispose_engine, init_database
from efoncier.exceptions import (
    ConflictError,
    DatabaseError,
    EFoncierError,
    FileStorageError,
    NotFoundError,
    RateLimitExceededError,
    ValidationError,
)
from efoncier.middleware.logging import RequestLoggingMiddleware
from efoncier.middleware.rate_limit import RateLimitMiddleware
from efoncier.middleware.request_id import RequestIDMiddleware, request_id_var
from efoncier.routes import documents, health, notes, parcel_history, parcels, requests, seed, stats

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configures the root logger once, on stdout.

    Format: 2024-01-15T12:00:00 [INFO] efoncier.services.parcel_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # These log every statement or connection at INFO.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("e-Foncier Backend %s starting up...", __version__)

    if settings.db_auto_migrate:
        await init_database()
    else:
        logger.info("DB_AUTO_MIGRATE is off; run `alembic upgrade head` to manage the schema")

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("e-Foncier Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(exc: EFoncierError, rid: str, include_details: bool = True) -> dict:
    body = {"error": exc.message, "code": exc.code, "request_id": rid}
    if include_details and exc.context:
        body["details"] = exc.context
    return body


def _field_name(loc) -> str:
    """('body', 'area') → 'area'; ('query', 'limit') → 'limit'."""
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header", "form")]
    return ".".join(parts) or "body"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps exceptions to status codes and the `{"error": ...}` body.

        ValidationError / RequestValidationError → 400
        NotFoundError                            → 404
        ConflictError                            → 409
        RateLimitExceededError                   → 429
        FileStorageError / DatabaseError         → 500 (context logged only)
        EFoncierError (base)                     → 500
        Exception                                → 500 with the exception message
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(status_code=400, content=_error_body(exc, rid))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Body or parameter of the wrong type or shape, rejected before the route runs."""
        rid = request_id_var.get("")
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = _field_name(first.get("loc", ()))
        if first.get("type") == "missing":
            message = f"Missing field: {field}"
        else:
            message = f"Invalid field: {field}"
        logger.warning("[%s] Request validation error: %s", rid, message)
        return JSONResponse(
            status_code=400,
            content={
                "error": message,
                "code": ValidationError.code,
                "details": {"field": field, "reason": first.get("msg", "")},
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(status_code=404, content=_error_body(exc, rid))

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        rid = request_id_var.get("")
        logger.warning("[%s] Conflict: %s", rid, exc.message)
        return JSONResponse(status_code=409, content=_error_body(exc, rid))

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=429,
            content=_error_body(exc, rid),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content=_error_body(exc, rid, include_details=False))

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        rid = request_id_var.get("")
        logger.error("[%s] File storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content=_error_body(exc, rid, include_details=False))

    @app.exception_handler(EFoncierError)
    async def handle_application_error(request: Request, exc: EFoncierError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content=_error_body(exc, rid, include_details=False))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": str(exc) or exc.__class__.__name__,
                "code": "internal_server_error",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="e-Foncier API",
        description=(
            "Land registry back office: parcel register with audit trail, "
            "agent notes, scanned documents and citizen document requests."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → GZip → CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(parcels.router)
    app.include_router(parcel_history.router)
    app.include_router(notes.router)
    app.include_router(documents.router)
    app.include_router(requests.router)
    app.include_router(stats.router)
    app.include_router(seed.router)
    app.include_router(health.router)

    return app


app = create_app()
