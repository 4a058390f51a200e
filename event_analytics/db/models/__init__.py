# event_analytics/db/models/__init__.py
from event_analytics.db.models.application import Application
from event_analytics.db.models.event import Event

__all__ = ["Application", "Event"]
