import os
import traceback
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment-specific .env file BEFORE any app imports
env = os.getenv("ENV", "local")
dotenv_file = f".env.{env}"
load_dotenv(dotenv_file)

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth_api.config import settings
from auth_api.db import async_engine, get_db, init_db
from auth_api.middleware import (
    BodyCaptureMiddleware,
    PerformanceMiddleware,
    RATE_LIMIT_HEADERS,
    RateLimitMiddleware,
    client_ip,
)
from auth_api.utils import (
    logger,
    configure_sentry,
    is_debug,
    is_production,
    API_PREFIX,
)
from auth_api.utils.errors import ApiError
from auth_api.utils.response_utils import error_response, internal_error, success, validation_error
from auth_api.utils.sentry_utils import capture_exception
from auth_api.utils.validation_utils import format_validation_errors
from auth_api.routers import auth_router, users_router
from auth_api.services.rate_limit import RateLimiter, build_policies, rate_limit_settings
from auth_api.services.scheduler import (
    PURGE_EXPIRED_TOKENS,
    SWEEP_RATE_LIMITS,
    make_rate_limit_sweep,
    purge_expired_tokens,
    scheduler_service,
)

# Initialize Sentry for error tracking (only in deployed environments)
sentry_enabled = configure_sentry()
if sentry_enabled:
    logger.info("Sentry error tracking initialized")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    if settings.auto_create_tables:
        logger.info("Creating database tables...")
        await init_db()

    rate_limiter = RateLimiter(
        build_policies(rate_limit_settings),
        enabled=rate_limit_settings.ENABLED,
    )
    app.state.rate_limiter = rate_limiter

    scheduler_service.add_job(
        SWEEP_RATE_LIMITS,
        rate_limit_settings.SWEEP_INTERVAL_SECONDS,
        make_rate_limit_sweep(rate_limiter),
    )
    # SCHEDULER_ENABLED only gates jobs that touch the database
    if settings.scheduler_enabled:
        scheduler_service.add_job(
            PURGE_EXPIRED_TOKENS,
            settings.token_purge_interval_seconds,
            purge_expired_tokens,
        )
    else:
        scheduler_service.remove_job(PURGE_EXPIRED_TOKENS)
    logger.info("Starting background scheduler...")
    await scheduler_service.start()

    yield

    # Shutdown
    logger.info("Stopping background scheduler...")
    await scheduler_service.stop()
    await async_engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="User authentication and account management API",
    version=settings.version,
    docs_url="/docs" if is_debug() else None,
    redoc_url=None,
    lifespan=lifespan,
)

# General rate limit and X-RateLimit-* headers
app.add_middleware(RateLimitMiddleware)

# Performance monitoring middleware
app.add_middleware(PerformanceMiddleware)

# Records a redacted body preview for the 500 handler
app.add_middleware(BodyCaptureMiddleware)

# CORS configuration (outermost)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=RATE_LIMIT_HEADERS,
)

# Register routers
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(users_router, prefix=API_PREFIX)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return error_response(
        exc.message,
        status_code=exc.status_code,
        errors=exc.errors,
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return validation_error(format_validation_errors(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(
        str(exc.detail),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(
        f"Unhandled exception: {exc.__class__.__name__}: {exc} | "
        f"{request.method} {request.url} | "
        f"body={getattr(request.state, 'body_preview', '')} | "
        f"ip={client_ip(request)} | "
        f"user_agent={request.headers.get('User-Agent', '')}",
        exc_info=True,
    )

    # Capture exception to Sentry
    capture_exception(exc)

    stack = None
    if not is_production():
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return internal_error(stack=stack)


@app.get("/")
async def root():
    return success({"version": settings.version}, f"Welcome to {settings.app_name}")


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check endpoint."""
    try:
        # Try a simple query to verify database connection
        await db.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "disconnected"

    return success(
        {
            "status": "healthy",
            "database": db_status,
            "scheduler": "running" if scheduler_service.running else "stopped",
        },
        "OK",
    )


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting {settings.app_name} (env={env}, debug={is_debug()})")
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=is_debug())
