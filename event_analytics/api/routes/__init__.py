from .auth import auth_router
from .analytics import analytics_router
from .health import health_router

__all__ = ["auth_router", "analytics_router", "health_router"]
