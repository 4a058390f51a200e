"""Health check endpoints for monitoring service status"""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from event_analytics.core.dependencies import DbSession, get_cache
from event_analytics.services.cache_service import CacheBackend, RedisCache

health_router = APIRouter(
    prefix="/health",
    tags=["health"],
)


@health_router.get(
    "/detailed",
    status_code=status.HTTP_200_OK,
    summary="Detailed health check",
    description="Check service dependencies including database and cache"
)
def detailed_health_check(db: DbSession, cache: CacheBackend = Depends(get_cache)):
    """Detailed health check including all dependencies"""
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "event-analytics",
        "dependencies": {}
    }

    # Check database
    try:
        db.execute(text("SELECT 1"))
        health_status["dependencies"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful"
        }
    except SQLAlchemyError:
        health_status["status"] = "unhealthy"
        health_status["dependencies"]["database"] = {
            "status": "unhealthy",
            "message": "Database connection failed"
        }

    # Check cache; an unavailable cache only degrades the service
    if isinstance(cache, RedisCache):
        if cache.ping():
            health_status["dependencies"]["cache"] = {
                "status": "healthy",
                "message": "Redis cache connection successful"
            }
        else:
            if health_status["status"] == "healthy":
                health_status["status"] = "degraded"
            health_status["dependencies"]["cache"] = {
                "status": "unavailable",
                "message": "Redis cache unreachable; serving uncached results"
            }
    else:
        health_status["dependencies"]["cache"] = {
            "status": "disabled",
            "message": "No cache configured"
        }

    return health_status
