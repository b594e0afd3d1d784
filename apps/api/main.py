"""
Tech Policy Wire - FastAPI Backend
Main application entry point with error handling, cache headers and API routing.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings, validate_security_settings
from routers import (
    health,
    auth,
    content,
    search,
    submissions,
    rss,
    metadata,
)
from services.errors import PolicyWireError
from services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Max-Age": "86400",
}
PRIVATE_PATH_PREFIXES = ("/api/me", "/api/submissions", "/auth")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    print("🚀 Starting Tech Policy Wire API...")
    validate_security_settings()
    if not (settings.CONTENT_SPREADSHEET_ID and settings.RESEARCHERS_SPREADSHEET_ID):
        print("⚠️ Spreadsheet ids not configured; content reads will be empty.")
    yield
    # Shutdown
    print("👋 Shutting down API...")


app = FastAPI(
    title="Tech Policy Wire API",
    description="Curated tech policy links backed by Google Sheets",
    version="0.1.0",
    lifespan=lifespan,
)

# One limiter per process, shared by every submission request.
app.state.submission_rate_limiter = RateLimiter(
    settings.SUBMISSION_RATE_LIMIT,
    settings.SUBMISSION_RATE_WINDOW_SECONDS,
)
app.state.rate_limiters = {}

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _internal_error_response() -> JSONResponse:
    """Generic 500 carrying its own CORS and cache headers, for use outside CORSMiddleware."""
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
        headers={
            "Access-Control-Allow-Origin": PREFLIGHT_HEADERS["Access-Control-Allow-Origin"],
            "Cache-Control": "no-store",
        },
    )


@app.middleware("http")
async def preflight_and_cache_headers(request: Request, call_next):
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=PREFLIGHT_HEADERS)

    try:
        response = await call_next(request)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _internal_error_response()

    if "cache-control" in response.headers:
        return response

    cacheable = (
        request.method in ("GET", "HEAD")
        and response.status_code < 400
        and "authorization" not in request.headers
        and not request.url.path.startswith(PRIVATE_PATH_PREFIXES)
    )
    if cacheable:
        response.headers["Cache-Control"] = f"public, max-age={settings.CACHE_MAX_AGE_SECONDS}"
    else:
        response.headers["Cache-Control"] = "no-store"
    return response


@app.exception_handler(PolicyWireError)
async def policy_wire_error_handler(request: Request, exc: PolicyWireError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail if exc.status_code != 404 or exc.detail != "Not Found" else "Not found"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}"
        for error in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": "Invalid request", "message": problems})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _internal_error_response()


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(auth.api_router, prefix="/api", tags=["Authentication"])
app.include_router(content.router, prefix="/api", tags=["Content"])
app.include_router(search.router, prefix="/api", tags=["Search"])
app.include_router(submissions.router, prefix="/api", tags=["Submissions"])
app.include_router(rss.router, prefix="/api", tags=["RSS"])
app.include_router(metadata.router, prefix="/api", tags=["Metadata"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Tech Policy Wire API",
        "version": "0.1.0",
        "status": "running"
    }
