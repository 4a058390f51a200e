"""Pydantic schemas for aggregate analytics views."""
from typing import Optional, Dict, Any, List
from pydantic import Field

from .application import CamelModel
from .event import EventOut


class EventSummary(CamelModel):
    """Per-event summary statistics."""
    event: Optional[str] = None
    count: int = 0
    unique_users: int = 0
    device_data: Dict[str, int] = Field(default_factory=dict)


class UserStats(CamelModel):
    """Recent activity and totals for one user."""
    user_id: str
    total_events: int
    recent_events: List[EventOut] = Field(default_factory=list)
    device_details: Dict[str, Any] = Field(default_factory=dict)
    ip_address: Optional[str] = None
