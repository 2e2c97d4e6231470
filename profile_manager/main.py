"""
Profile Manager API.

FastAPI application for creating, searching, and managing profiles.
"""

import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from profile_manager.config import settings, validate_security_settings
from profile_manager.errors import ProfileManagerError
from profile_manager.logging_config import get_logger, setup_logging
from profile_manager.middleware.rate_limit import limiter
from profile_manager.routers.auth import router as auth_router
from profile_manager.routers.preferences import router as preferences_router
from profile_manager.routers.profiles import router as profiles_router
from profile_manager.schemas.profile import format_errors
from profile_manager.storage import StorageContext, StorageFacade

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    setup_logging()
    validate_security_settings()
    # Startup: pick the backend and seed accounts
    app.state.storage = await StorageContext.create(settings)
    yield
    # Shutdown
    await app.state.storage.close()


app = FastAPI(
    title="Profile Manager API",
    description="Create, search, and manage profiles",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter state
app.state.limiter = limiter

# Rate limit exceeded handler
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(profiles_router)
app.include_router(preferences_router)


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


def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: list[Any] | None = None,
) -> JSONResponse:
    error: dict[str, Any] = {
        "code": code,
        "message": message,
        "request_id": getattr(request.state, "request_id", None),
    }
    if details is not None:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report every failing field of a malformed request as a 400."""
    messages = format_errors(exc.errors())
    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        "; ".join(messages) or "Validation error",
        details=messages,
    )


@app.exception_handler(ProfileManagerError)
async def domain_exception_handler(request: Request, exc: ProfileManagerError) -> JSONResponse:
    """Render domain errors with the status they carry."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Request %s failed: %s", request.url.path, exc.message)
    return _error_response(request, exc.status_code, exc.code, exc.message, exc.details)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unwrap ``{"error": {...}}`` details into the standard envelope."""
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        error = dict(exc.detail["error"])
        response = _error_response(request, exc.status_code, error.pop("code"), error.pop("message"))
    else:
        response = _error_response(request, exc.status_code, "HTTP_ERROR", str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent error format."""
    logger.exception("Unhandled error on %s", request.url.path)
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An unexpected error occurred",
    )


# --- Health Check ---


@app.get("/api/v1/health", tags=["System"])
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint.

    Reports which backend new requests are routed to.
    """
    facade: StorageFacade = request.app.state.storage.facade
    return {"status": "healthy", "backend": facade.active_backend.name}
