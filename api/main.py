"""
api/main.py -- FastAPI application entry point for ClubSite.

Exposes the club website backend over HTTP: login, admin provisioning and
tenant-scoped club content.

Run with:  python main.py serve
           uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware     -- adds CORS headers for the configured browser origins
  2. SlowAPIMiddleware  -- enforces per-route rate limits from api.limiter

Lifespan handles startup (stores, superadmin bootstrap, upload directory)
and shutdown (dispose of the shared engine). A failed bootstrap aborts startup:
the server never accepts requests without a superadmin.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.admins import router as admins_router
from api.routes.v1.auth import router as auth_router
from api.routes.v1.clubs import router as clubs_router
from auth.bootstrap import ensure_superadmin
from auth.dependencies import get_current_identity
from auth.errors import AuthError, StoreUnavailable
from auth.models import Identity
from auth.store import AccountStore
from content.files import UploadStorage
from content.store import ContentStore
from core.config import get_settings
from core.db import make_engine

VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("clubsite.api")

_settings = get_settings()

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the stores, guarantee a superadmin, then serve.

    Both stores share one engine, so DB_POOL_SIZE bounds the whole process.
    Startup order matters:
      1. Account store first -- the bootstrap writes to it.
      2. Bootstrap second -- raises StoreUnavailable on any DB error, which
         propagates out of the lifespan and stops the server.
      3. Content store and upload directory last.
    Any startup failure disposes of the engine before propagating.
    """
    logger.info("ClubSite API starting up")
    engine = None
    try:
        engine = make_engine(_settings.database_url, _settings.db_pool_size)
        app.state.account_store = AccountStore(engine=engine)
    except SQLAlchemyError as exc:
        if engine is not None:
            engine.dispose()
        raise StoreUnavailable("Credential store unavailable at startup") from exc

    try:
        created = ensure_superadmin(app.state.account_store, _settings)
        app.state.content_store = ContentStore(engine=engine)
        app.state.uploads = UploadStorage(_settings.upload_dir, _settings.max_upload_bytes)
    except (StoreUnavailable, SQLAlchemyError, OSError):
        engine.dispose()
        raise
    logger.info("Auth initialized (superadmin_created=%s)", created)
    logger.info("Uploads stored under %s", _settings.upload_dir)

    yield

    app.state.content_store.close()
    app.state.account_store.close()
    engine.dispose()
    logger.info("ClubSite API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="ClubSite API",
    description="Backend for club websites: team rosters, news, blogs, galleries and application forms.",
    version=VERSION,
    lifespan=lifespan,
    # Built-in /docs and /redoc are replaced by auth-protected routes below.
    docs_url=None,
    redoc_url=None,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(admins_router, prefix="/api/v1", tags=["Admins"])
app.include_router(clubs_router, prefix="/api/v1", tags=["Club content"])
# The /uploads static mount is added by asgi.py.


# ---------------------------------------------------------------------------
# Auth-protected API documentation
# ---------------------------------------------------------------------------


@app.get("/docs", include_in_schema=False)
async def docs(identity: Identity = Depends(get_current_identity)):
    """Swagger UI -- requires a bearer token."""
    return get_swagger_ui_html(openapi_url="/openapi.json", title="ClubSite API")


@app.get("/redoc", include_in_schema=False)
async def redoc(identity: Identity = Depends(get_current_identity)):
    """ReDoc UI -- requires a bearer token."""
    return get_redoc_html(openapi_url="/openapi.json", title="ClubSite API")


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Map the auth taxonomy onto the envelope. 401s advertise the Bearer scheme."""
    response = JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=ErrorDetail(code=exc.code, message=exc.message)).model_dump(),
    )
    if exc.status_code == 401:
        response.headers["WWW-Authenticate"] = "Bearer"
    return response


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a Retry-After header when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error=ErrorDetail(
                code="rate_limited",
                message="Too many requests.",
                detail=str(exc),
            )
        ).model_dump(),
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Route handlers raise HTTPException with detail=ErrorDetail(...).model_dump().
    When detail is already a dict it becomes the error field as-is.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(OperationalError)
async def store_unavailable_handler(request: Request, exc: OperationalError) -> JSONResponse:
    """The database went away mid-request. Reported as 503, never as a credential failure."""
    logger.error("Store unavailable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content=ErrorResponse(
            error=ErrorDetail(
                code="store_unavailable",
                message="The data store is temporarily unavailable.",
            )
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined here (not in a router) so it is reachable regardless of router
# registration. No rate limit: load balancer probes must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"], response_model=HealthResponse)
def health(request: Request) -> JSONResponse:
    """Return liveness, version and database reachability."""
    components = {"app": "ok", "database": "ok"}
    try:
        request.app.state.account_store.ping()
    except SQLAlchemyError:
        logger.warning("Health check: database unreachable")
        components["database"] = "unavailable"

    healthy = components["database"] == "ok"
    body = HealthResponse(status="healthy" if healthy else "degraded", version=VERSION, components=components)
    return JSONResponse(status_code=200 if healthy else 503, content=body.model_dump())
