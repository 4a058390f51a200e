"""Pydantic schemas for analytics events."""
from typing import Optional, Any
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from .application import CamelModel
from event_analytics.utils.timeutils import ensure_utc


class EventCreate(CamelModel):
    """Schema for an ingested event. Only the event name is required."""

    # Numeric ids from client SDKs are stored as strings
    model_config = ConfigDict(coerce_numbers_to_str=True)

    event: Optional[str] = Field(None, description="Event name, e.g. page_view or signup_click")
    url: Optional[str] = None
    referrer: Optional[str] = None
    device: Optional[str] = Field(None, description="Device label, e.g. mobile or desktop")
    ip_address: Optional[str] = None
    timestamp: Optional[datetime] = Field(None, description="ISO-8601; defaults to receipt time")
    user_id: Optional[str] = None
    metadata: Optional[Any] = Field(None, description="Opaque; usually a key/value bag (browser, os, ...)")


class EventRecorded(BaseModel):
    message: str = "event recorded"


class EventOut(CamelModel):
    """Schema for an event in read views. The ingestion API key is not exposed."""
    id: UUID
    app_id: UUID
    event: str
    url: Optional[str] = None
    referrer: Optional[str] = None
    device: Optional[str] = None
    ip_address: Optional[str] = None
    user_id: Optional[str] = None
    timestamp: datetime
    metadata: Any = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, event) -> "EventOut":
        return cls(
            id=event.id,
            app_id=event.app_id,
            event=event.event,
            url=event.url,
            referrer=event.referrer,
            device=event.device,
            ip_address=event.ip_address,
            user_id=event.user_id,
            timestamp=ensure_utc(event.timestamp),
            metadata=event.event_metadata or {},
            created_at=ensure_utc(event.created_at),
        )
