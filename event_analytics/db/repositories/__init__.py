from event_analytics.db.repositories.application_repository import ApplicationRepository
from event_analytics.db.repositories.event_repository import EventRepository

__all__ = [
    "ApplicationRepository",
    "EventRepository",
]
