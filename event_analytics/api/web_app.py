# Standard library
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

# Third party
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

# Local imports
from event_analytics.core.config import settings
from event_analytics.core.exceptions import AnalyticsError
from event_analytics.core.logging import get_logger
from event_analytics.db.base import SessionLocal
from event_analytics.services.cache_service import close_cache_service, get_cache_service
import event_analytics.api as api


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI application startup and shutdown events"""
    # Startup
    logger.info("Event analytics API starting up...")

    # Fail fast if the event store is unreachable
    try:
        session = SessionLocal()
        try:
            session.execute(text("SELECT 1")).fetchone()
        finally:
            session.close()
        logger.info("Database connection successful")
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        raise

    # Build the cache backend up front; it degrades silently if Redis is down
    get_cache_service()

    yield  # This is where FastAPI serves the application

    # Shutdown
    close_cache_service()
    logger.info("Event analytics API shutting down...")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title="Event Analytics",
        description="Ingests client-side analytics events per registered application and serves event summaries and user activity stats.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        default_response_class=JSONResponse,
    )

    for name, router in api.api_routers:
        app.include_router(router, prefix="/api", tags=[name])

    # Add request timing middleware
    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response

    # Refuse oversized bodies before they are read
    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                return _error(400, "Invalid Content-Length header")
            if declared > settings.MAX_BODY_BYTES:
                logger.info(f"Rejected {declared}-byte body on {request.url.path}")
                return _error(413, "Request body too large")
        return await call_next(request)

    # Liveness probe
    @app.get("/health")
    async def health_check():
        """Liveness probe; does not touch the database or cache"""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # Domain errors carry their own status
    @app.exception_handler(AnalyticsError)
    async def analytics_error_handler(request: Request, exc: AnalyticsError):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}", exc_info=exc)
        else:
            logger.info(f"{exc.status_code} {type(exc).__name__} on {request.url.path}: {exc.message}")
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    # Malformed bodies and parameters are reported as bad input
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        logger.info(f"Validation error on {request.url.path}: {errors}")
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
        else:
            message = "Invalid request"
        return _error(400, message)

    # Store failures never leak internal detail
    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Store error on {request.method} {request.url.path}: {exc}", exc_info=True)
        return _error(500, "Internal server error")

    # Anything else is a 500 without detail
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Global exception: {exc}", exc_info=True)
        return _error(500, "Internal server error")

    return app


# ASGI entry point used by uvicorn
app = create_app()
