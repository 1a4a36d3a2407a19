"""
api/main.py -- FastAPI application entry point for the appliance tracker.

Run with:  python main.py
           uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware  -- adds CORS headers for the configured origins
  2. log_requests    -- one access-log line per request

Lifespan owns the one SQLAlchemy engine: it creates it, hands it to both
stores, and disposes it on shutdown. Components live on app.state and route
handlers read them from there; nothing is a module-level singleton.

Error contract: every failure response is {"error": "<message>"}. The
exception handlers below are the only place statuses are chosen.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from api.models import ErrorResponse, HealthResponse
from api.routes.appliances import router as appliances_router
from api.routes.auth import router as auth_router
from auth.store import UserStore
from auth.tokens import TokenIssuer
from core.config import get_settings
from core.database import create_db_engine
from core.errors import AuthError, AuthErrorKind, NotFoundError, StoreError, ValidationError
from inventory.store import ApplianceStore

VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("appliance_tracker.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the engine, stores, and token issuer; dispose the engine on shutdown.

    Table creation is idempotent, so starting against an existing database
    file keeps its rows.
    """
    settings = get_settings()
    logging.getLogger("appliance_tracker").setLevel(settings.log_level.upper())

    logger.info("Appliance tracker starting up")
    app.state.engine = create_db_engine(settings.database_url)
    app.state.user_store = UserStore(app.state.engine)
    app.state.appliances = ApplianceStore(app.state.engine)
    app.state.tokens = TokenIssuer(settings.secret_key, settings.token_expire_seconds)
    logger.info("Database ready at %s", settings.database_url)

    yield

    app.state.engine.dispose()
    logger.info("Appliance tracker shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Appliance Tracker API",
    description="Register household appliances and their energy consumption.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


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

app.include_router(auth_router, tags=["Auth"])
app.include_router(appliances_router, tags=["Appliances"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


_AUTH_STATUS: dict[AuthErrorKind, int] = {
    AuthErrorKind.MISSING_TOKEN: 403,
    AuthErrorKind.USER_NOT_FOUND: 401,
    AuthErrorKind.BAD_PASSWORD: 401,
}


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Map an AuthError kind to its status.

    INVALID_TOKEN uses Settings.invalid_token_status (500 unless configured),
    which is what existing clients have always received for a bad token.
    """
    status_code = _AUTH_STATUS.get(exc.kind, get_settings().invalid_token_status)
    return _error(status_code, exc.message)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error(400, exc.message)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, exc.message)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    """Storage failures are 500s. The driver detail was already logged by the store."""
    return _error(500, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 when the body is not JSON or a field contradicts the data model.

    Only each error's location and message are returned. The rejected input is
    left out so a password sent with the wrong type is never echoed back.
    """
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}" for err in exc.errors()
    )
    return _error(422, f"Request validation failed: {problems}")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Unknown routes (404) and wrong methods (405) get the same envelope."""
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness, version, and whether both tables answer a query. No auth."""
    try:
        request.app.state.user_store.ping()
        request.app.state.appliances.ping()
        database = "ok"
    except StoreError:
        database = "error"
    return HealthResponse(version=VERSION, components={"app": "ok", "database": database})
