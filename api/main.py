"""
api/main.py -- FastAPI application factory for the College Tours API.

create_app(settings) builds a fully wired app from one Settings object:

  TokenService  <- settings.secret_key, settings.token_expire_seconds
  BearerAuth    <- TokenService, settings.auth_dev_bypass
  AdminGate     <- settings.admin_emails
  UserStore / TourStore <- settings.database_url (opened in lifespan)

All of them live on app.state; route dependencies look them up there. Nothing
reads configuration at import time, so tests build isolated apps freely.

Run with:  uvicorn asgi:app --reload
           python main.py

Middleware stack (outermost to innermost):
  1. LegacyCollegesMiddleware -- rewrites /api/colleges/* to /api/tours/*
  2. request logging          -- method, path, status, latency
  3. SlowAPIMiddleware        -- per-route rate limits from api.limiter
  4. CORSMiddleware           -- CORS headers for browser front ends
  5. TrustedHostMiddleware    -- rejects unexpected Host headers
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.compat import LegacyCollegesMiddleware
from api.limiter import limiter
from api.models import ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.courses import router as courses_router
from api.routes.events import router as events_router
from api.routes.tours import router as tours_router
from auth.dependencies import AdminGate, BearerAuth
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import Settings, get_settings
from core.errors import ApiError, ServerError
from tours.store import TourStore

API_VERSION = "1.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("collegetours.api")


# ---------------------------------------------------------------------------
# Lifespan -- startup / shutdown
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the stores on startup and dispose of them on shutdown."""
    settings: Settings = app.state.settings
    logger.info("College Tours API starting up")
    app.state.user_store = UserStore(settings.database_url)
    app.state.tour_store = TourStore(settings.database_url)
    logger.info("Stores initialized (%d registered users)", app.state.user_store.count_users())

    yield

    app.state.tour_store.close()
    app.state.user_store.close()
    logger.info("College Tours API shutdown complete")


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------


def _error_response(request: Request, exc: ApiError) -> JSONResponse:
    """Render an ApiError as {message, code, error?}.

    Client errors keep their detail (e.g. which fields were missing). Server
    error detail is internal and only shown in debug mode.
    """
    detail = exc.detail
    if exc.status_code >= 500 and not request.app.state.settings.debug:
        detail = None
    body = ErrorResponse(message=exc.message, code=exc.code, error=detail)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return _error_response(request, exc)


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Map any database failure to a 500 ServerError."""
    logger.exception("Store failure on %s %s", request.method, request.url.path)
    return _error_response(request, ServerError("Server error", detail=str(exc)))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes, wrong methods and other framework-level HTTP errors."""
    body = ErrorResponse(message=str(exc.detail), code=f"http_{exc.status_code}")
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = ErrorResponse(message="Request validation failed.", code="validation_error", error=str(exc.errors()))
    return JSONResponse(status_code=422, content=body.model_dump())


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with Retry-After when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    body = ErrorResponse(message="Too many requests.", code="rate_limited", error=str(exc.detail))
    response = JSONResponse(status_code=429, content=body.model_dump())
    response.headers["Retry-After"] = str(retry_after)
    return response


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected failures. The traceback goes to the log only."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(request, ServerError(detail=repr(exc)))


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


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
# Health endpoint
# ---------------------------------------------------------------------------


def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and database reachability. No auth."""
    try:
        db_ok = request.app.state.tour_store.ping() and request.app.state.user_store.ping()
    except SQLAlchemyError:
        logger.exception("Health check database ping failed")
        db_ok = False
    return HealthResponse(version=API_VERSION, components={"app": "ok", "database": "ok" if db_ok else "error"})


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the ASGI app. Defaults to the environment-derived Settings singleton."""
    settings = settings or get_settings()

    app = FastAPI(
        title="College Tours API",
        description="Browse college tours, their courses and events.",
        version=API_VERSION,
        lifespan=lifespan,
    )

    tokens = TokenService(settings.secret_key, settings.token_expire_seconds)
    app.state.settings = settings
    app.state.tokens = tokens
    app.state.bearer_auth = BearerAuth(tokens, dev_bypass=settings.auth_dev_bypass)
    app.state.admin_gate = AdminGate(settings.admin_emails)

    # One process-wide limiter: the route decorators register their limits on
    # it at import time. The most recently built app decides whether it is on,
    # and building an app starts it with empty counters.
    limiter.enabled = settings.rate_limit_enabled
    limiter.reset()
    # SlowAPI looks for app.state.limiter by convention.
    app.state.limiter = limiter

    # add_middleware() wraps: the last one added is the outermost.
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        max_age=3600,
    )
    app.add_middleware(SlowAPIMiddleware)
    app.middleware("http")(log_requests)
    app.add_middleware(LegacyCollegesMiddleware)

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth_router, prefix="/api", tags=["Auth"])
    app.include_router(tours_router, prefix="/api", tags=["Tours"])
    app.include_router(courses_router, prefix="/api", tags=["Courses"])
    app.include_router(events_router, prefix="/api", tags=["Events"])
    app.add_api_route("/api/health", health, methods=["GET"], response_model=HealthResponse, tags=["Health"])

    return app
