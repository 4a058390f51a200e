# Authentication and key lifecycle routers
from .routes.auth import auth_router

# Ingestion and analytics routers
from .routes.analytics import analytics_router

# Operational routers
from .routes.health import health_router

api_routers = [
    ("auth", auth_router),
    ("analytics", analytics_router),
    ("health", health_router),
]

__all__ = ["api_routers", "auth_router", "analytics_router", "health_router"]
