"""Service for ingesting analytics events."""
from typing import Optional
from sqlalchemy.orm import Session

from event_analytics.core.exceptions import ValidationError
from event_analytics.core.logging import get_logger
from event_analytics.db.models.application import Application
from event_analytics.db.models.event import Event
from event_analytics.db.repositories.event_repository import EventRepository
from event_analytics.schemas.event import EventCreate
from event_analytics.utils.timeutils import ensure_utc, utcnow

logger = get_logger(__name__)


class EventService:
    """Normalizes inbound events and appends them to the event store."""

    def __init__(self, db_session: Session):
        self.db = db_session
        self.repository = EventRepository(db_session)

    def ingest(
        self,
        application: Application,
        payload: EventCreate,
        client_ip: Optional[str] = None,
    ) -> Event:
        """
        Record an event for an authenticated application.

        Args:
            application: Application resolved by the auth gate
            payload: Inbound event data
            client_ip: Address of the caller, used when the payload has no ipAddress

        Returns:
            The stored Event

        Raises:
            ValidationError: If the event name is missing
        """
        if not payload.event or not payload.event.strip():
            raise ValidationError("event required")

        event = Event(
            app_id=application.id,
            api_key=application.api_key,
            event=payload.event,
            url=payload.url,
            referrer=payload.referrer,
            device=payload.device,
            ip_address=payload.ip_address or client_ip,
            user_id=payload.user_id,
            timestamp=ensure_utc(payload.timestamp) if payload.timestamp else utcnow(),
            event_metadata=payload.metadata or {},
        )

        stored = self.repository.create(event)
        logger.info(f"Recorded event '{stored.event}' for application {application.id}")
        return stored
