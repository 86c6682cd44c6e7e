"""
api/main.py -- FastAPI application entry point for MedAI.

Run with:  uvicorn asgi:app --reload
           python main.py serve

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- credentialed CORS for the configured frontend origins
  3. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter

Lifespan opens the user and analysis stores, then selects the session
strategy ONCE from Settings.jwt_secret and builds the SessionManager around
it. Every request afterwards sees the same strategy.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from analysis.store import AnalysisStore
from api.limiter import limiter
from api.models import HealthResponse, MessageResponse
from api.routes.analysis import router as analysis_router
from api.routes.auth import router as auth_router
from api.routes.profile import router as profile_router
from auth.errors import ServerError, SessionError
from auth.sessions import EMAIL_HEADER, SessionManager, build_session_strategy
from auth.store import UserStore
from core.config import get_settings

VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("medai.api")

_settings = get_settings()


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Everything before yield runs on startup; everything after yield runs on
    shutdown.
    """
    logger.info("MedAI API starting up")
    if _settings.database_url:
        app.state.user_store = UserStore(_settings.database_url)
        app.state.analysis_store = AnalysisStore(_settings.database_url)
    else:
        app.state.user_store = UserStore()
        app.state.analysis_store = AnalysisStore()
    app.state.session_manager = SessionManager(app.state.user_store, build_session_strategy(_settings))
    logger.info("Session mode: %s", app.state.session_manager.mode)

    yield

    app.state.user_store.close()
    app.state.analysis_store.close()
    logger.info("MedAI API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="MedAI API",
    description="Doctor accounts, sessions, and diagnostic analysis history.",
    version=VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(TrustedHostMiddleware, allowed_hosts=_settings.allowed_hosts)

# allow_credentials is required: the frontend sends cookies with every call.
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", EMAIL_HEADER],
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


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

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(profile_router, prefix="/api", tags=["Profile"])
app.include_router(analysis_router, prefix="/api", tags=["Analysis"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# Every error leaves the API as {"message": "..."} so the frontend can show
# data.message without inspecting the status code first.
# ---------------------------------------------------------------------------


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=MessageResponse(message=message).model_dump())


@app.exception_handler(SessionError)
async def session_error_handler(request: Request, exc: SessionError) -> JSONResponse:
    """Map the auth error taxonomy onto its HTTP status."""
    logger.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return _message(exc.status_code, exc.message)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _message(429, "Too many requests.")
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are client errors like any other missing field: 400."""
    logger.info("Validation failed on %s %s: %s", request.method, request.url.path, exc.errors())
    return _message(400, "Invalid request body")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _message(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    error = ServerError()
    return _message(error.status_code, error.message)


# ---------------------------------------------------------------------------
# Health endpoints
#
# No rate limit applied -- health checks from load balancers and the hosting
# platform must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/", include_in_schema=False, response_class=PlainTextResponse)
async def root() -> str:
    return "MedAI backend running successfully"


@app.get("/api/health", tags=["Health"])
async def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and the active session mode."""
    return HealthResponse(version=VERSION, session_mode=request.app.state.session_manager.mode)
