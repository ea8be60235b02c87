"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from docshelf.api.routes import auth, categories, comments, documents, export, search, tags
from docshelf.config import settings
from docshelf.db.database import create_engine, create_session_factory, dispose_engine
from docshelf.db.exceptions import DatabaseError, DuplicateRecordError
from docshelf.middleware.rate_limiter import limiter, rate_limit_exceeded_handler
from docshelf.middleware.request_id import RequestIDLogFilter, RequestIDMiddleware
from docshelf.models.envelope import ApiError, error_response
from docshelf.services.exceptions import ServiceError
from docshelf.services.pdf_renderer import create_pdf_renderer
from docshelf.services.redis_client import PageCache, close_redis, create_redis

logger = logging.getLogger(__name__)

# Configure logging format based on dev_mode
if not settings.dev_mode:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='{"time":"%(asctime)s","level":"%(levelname)s","name":"%(name)s",'
        '"request_id":"%(request_id)s","message":"%(message)s"}',
    )
else:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s: %(message)s",
    )
for _handler in logging.getLogger().handlers:
    _handler.addFilter(RequestIDLogFilter())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - handles startup and shutdown."""
    # Startup
    engine = create_engine()
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    redis_client = await create_redis() if settings.page_cache_enabled else None
    app.state.redis = redis_client
    app.state.page_cache = PageCache(
        redis_client,
        ttl_seconds=settings.page_cache_ttl_seconds,
        enabled=settings.page_cache_enabled,
    )
    app.state.pdf_renderer = create_pdf_renderer()
    yield
    # Shutdown
    await close_redis(redis_client)
    await dispose_engine(engine)

app = FastAPI(
    title="Docshelf API",
    description="Versioned documentation with categories, comments, search and PDF export",
    version="0.1.0",
    openapi_url="/api/v1/openapi.json",
    docs_url="/docs" if settings.dev_mode else None,
    redoc_url="/redoc" if settings.dev_mode else None,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.state.limiter = limiter


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if not settings.dev_mode:
            response.headers["Strict-Transport-Security"] = (
                "max-age=63072000; includeSubDomains"
            )
        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestIDMiddleware)


# ---------------------------------------------------------------------------
# Global exception handlers
# ---------------------------------------------------------------------------

def _error(status_code: int, code: str, message: str, field: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response([ApiError(code=code, message=message, field=field)]),
    )


app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]


@app.exception_handler(ServiceError)
async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(level, "%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        ApiError(
            code="VALIDATION_ERROR",
            message=err.get("msg", "Invalid request"),
            field=".".join(str(p) for p in err.get("loc", ())[1:]) or None,
        )
        for err in exc.errors()
    ]
    logger.info("Invalid request on %s %s: %d errors", request.method, request.url.path, len(errors))
    return JSONResponse(status_code=400, content=error_response(errors))


@app.exception_handler(StarletteHTTPException)
async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
    return _error(exc.status_code, code, str(exc.detail))


@app.exception_handler(DuplicateRecordError)
async def _duplicate_record_handler(request: Request, exc: DuplicateRecordError) -> JSONResponse:
    logger.info("Duplicate record on %s %s: %s", request.method, request.url.path, exc)
    return _error(400, "VALIDATION_ERROR", str(exc))


@app.exception_handler(DatabaseError)
async def _database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    detail = str(exc) if settings.dev_mode else "Internal server error"
    return _error(500, "INTERNAL_ERROR", detail)


@app.exception_handler(Exception)
async def _global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    detail = str(exc) if settings.dev_mode else "Internal server error"
    return _error(500, "INTERNAL_ERROR", detail)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
    expose_headers=["Content-Disposition", "X-Request-ID"],
)


# ---------------------------------------------------------------------------
# Routers, all under /api/v1/
# ---------------------------------------------------------------------------

app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(categories.router, prefix="/api/v1/categories", tags=["categories"])
app.include_router(documents.router, prefix="/api/v1/documents", tags=["documents"])
app.include_router(tags.router, prefix="/api/v1/tags", tags=["tags"])
app.include_router(comments.router, prefix="/api/v1/comments", tags=["comments"])
app.include_router(search.router, prefix="/api/v1/search", tags=["search"])
app.include_router(export.router, prefix="/api/v1/export", tags=["export"])

# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@app.get("/health")
async def health_check() -> dict:
    """Liveness check: verifies the API process is alive."""
    return {"status": "healthy"}


@app.get("/health/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness check: verifies DB and Redis are reachable."""
    checks: dict[str, str] = {}

    try:
        async with request.app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception:
        logger.warning("Readiness: database unreachable", exc_info=True)
        checks["database"] = "unavailable"

    redis_client = getattr(request.app.state, "redis", None)
    if redis_client is None:
        checks["redis"] = "disabled"
    else:
        try:
            await redis_client.ping()
            checks["redis"] = "ok"
        except Exception:
            logger.warning("Readiness: redis unreachable", exc_info=True)
            checks["redis"] = "unavailable"

    all_ok = all(v in ("ok", "disabled") for v in checks.values())
    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={"status": "ready" if all_ok else "degraded", "services": checks},
    )


@app.get("/")
async def root() -> dict:
    """Root endpoint."""
    return {"message": "Docshelf API", "docs": "/docs"}
