"""SQLAlchemy model for ingested analytics events."""
from uuid import uuid4
from sqlalchemy import (
    Column, String, DateTime, UUID, JSON, Index
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from event_analytics.db.base import Base


class Event(Base):
    """A single analytics occurrence. Rows are append-only."""

    __tablename__ = "events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)

    # Owning application (no foreign key)
    app_id = Column(UUID(as_uuid=True), nullable=False)
    # Key used at ingestion time, kept even after the application rotates it
    api_key = Column(String(64), nullable=False)

    event = Column(String(255), nullable=False)
    url = Column(String(2048))
    referrer = Column(String(2048))
    device = Column(String(255))
    ip_address = Column(String(45))  # Supports IPv6
    user_id = Column(String(255))

    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Open key/value bag (browser, os, screen size, ...)
    event_metadata = Column(
        "metadata", JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict
    )
    """
    Example metadata content:
    {
        "browser": "Chrome",
        "os": "Android",
        "screen": {"width": 412, "height": 915}
    }
    """

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_events_event_timestamp", "event", "timestamp"),
        Index("ix_events_app_event_timestamp", "app_id", "event", "timestamp"),
        Index("ix_events_user_id", "user_id"),
        Index("ix_events_app_id", "app_id"),
        Index("ix_events_api_key", "api_key"),
        Index("ix_events_timestamp", "timestamp"),
    )

    def __repr__(self):
        return f"<Event(id={self.id}, event={self.event}, user_id={self.user_id})>"
