"""
Conduit API - social blogging platform.

FastAPI application exposing the Conduit stores over HTTP.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from conduit.config import settings, validate_security_settings
from conduit.database import init_db
from conduit.errors import ConduitError, UnauthorizedError
from conduit.observability import setup_logging
from conduit.routers.articles import router as articles_router
from conduit.routers.comments import router as comments_router
from conduit.routers.profiles import router as profiles_router
from conduit.routers.users import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    """Application lifespan handler for startup/shutdown."""
    setup_logging(settings.log_level, settings.log_format)
    validate_security_settings()
    await init_db()
    logger.info("Conduit API started (%s)", settings.environment)
    yield


app = FastAPI(
    title="Conduit API",
    description="Social blogging: users, follows, articles, favorites and comments",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

# Include routers
app.include_router(users_router)
app.include_router(profiles_router)
app.include_router(articles_router)
app.include_router(comments_router)


# --- Middleware ---


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add a unique request ID to each request."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# --- Exception Handlers ---


def _sanitize_error_detail(error: dict[str, Any]) -> dict[str, Any]:
    """Sanitize Pydantic error detail to be JSON-serializable."""
    sanitized = {}
    for key, value in error.items():
        if key == "ctx":
            # Context may hold exception instances
            sanitized[key] = {k: str(v) for k, v in value.items()} if isinstance(value, dict) else str(value)
        elif key == "loc":
            sanitized[key] = [str(loc) for loc in value]
        elif key == "input":
            continue
        else:
            sanitized[key] = value
    return sanitized


@app.exception_handler(ConduitError)
async def conduit_exception_handler(request: Request, exc: ConduitError) -> JSONResponse:
    """Turn store errors into the error envelope with their own status."""
    request_id = getattr(request.state, "request_id", None)
    log = logger.warning if exc.http_status >= 500 else logger.info
    log(
        "%s: %s",
        type(exc).__name__,
        exc.message,
        extra={"error_code": exc.code, "path": request.url.path, "request_id": request_id},
    )

    content = exc.to_response()
    content["error"]["request_id"] = request_id
    headers = {"WWW-Authenticate": "Token"} if isinstance(exc, UnauthorizedError) else None
    return JSONResponse(status_code=exc.http_status, content=content, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with consistent error format."""
    request_id = getattr(request.state, "request_id", None)

    errors = [_sanitize_error_detail(e) for e in exc.errors()]
    if errors:
        first_error = errors[0]
        field = ".".join(str(loc) for loc in first_error.get("loc", []))
        msg = first_error.get("msg", "Validation error")
        message = f"{field}: {msg}" if field else msg
    else:
        message = "Validation error"

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": message,
                "request_id": request_id,
                "details": errors,
            }
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions without leaking internals."""
    request_id = getattr(request.state, "request_id", None)
    logger.error(
        "Unhandled exception on %s",
        request.url.path,
        exc_info=exc,
        extra={"request_id": request_id},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "request_id": request_id,
            }
        },
    )


# --- Health Check ---


@app.get("/api/health", tags=["System"])
async def health_check() -> dict[str, str]:
    """
    Health check endpoint.

    Returns 200 OK if the API is running.
    """
    return {"status": "healthy"}
