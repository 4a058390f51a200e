"""Repository for analytics event data access."""
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from sqlalchemy.orm import Session, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import desc

from event_analytics.core.exceptions import StoreError
from event_analytics.core.logging import get_logger
from event_analytics.db.models.event import Event

logger = get_logger(__name__)


class EventRepository:
    """Repository for append-only event operations."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, event: Event) -> Event:
        """Persist a new event record."""
        self.db.add(event)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to store event '{event.event}': {e}")
            raise StoreError() from e
        self.db.refresh(event)
        return event

    def get_by_id(self, event_id: UUID) -> Optional[Event]:
        """Get event by ID."""
        return self.db.query(Event).filter(Event.id == event_id).first()

    def filter_query(
        self,
        event: Optional[str] = None,
        app_id: Optional[UUID] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Query:
        """
        Build a query over events matching the given predicates.

        Both time bounds are inclusive. Predicates line up with the
        (event, timestamp) and (app_id, event, timestamp) indexes.
        """
        query = self.db.query(Event)

        if app_id:
            query = query.filter(Event.app_id == app_id)
        if event:
            query = query.filter(Event.event == event)
        if start:
            query = query.filter(Event.timestamp >= start)
        if end:
            query = query.filter(Event.timestamp <= end)

        return query

    def list_recent_for_user(self, user_id: str, limit: int = 20) -> List[Event]:
        """List the most recent events for a user, newest first."""
        return (
            self.db.query(Event)
            .filter(Event.user_id == user_id)
            .order_by(desc(Event.timestamp), desc(Event.created_at))
            .limit(limit)
            .all()
        )

    def count_for_user(self, user_id: str) -> int:
        """Count all events ever recorded for a user."""
        return self.db.query(Event).filter(Event.user_id == user_id).count()
