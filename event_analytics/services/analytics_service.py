"""Service for event summary and user activity aggregation."""
import hashlib
import json
from typing import Dict, Any, Optional, Callable, Union
from datetime import date, datetime
from sqlalchemy.orm import Session
from sqlalchemy import func, desc
from uuid import UUID

from event_analytics.core.config import settings
from event_analytics.core.exceptions import ValidationError
from event_analytics.core.logging import get_logger
from event_analytics.db.models.event import Event
from event_analytics.db.repositories.event_repository import EventRepository
from event_analytics.schemas.analytics import EventSummary, UserStats
from event_analytics.schemas.event import EventOut
from event_analytics.services.cache_service import CacheBackend, NullCache
from event_analytics.utils.timeutils import parse_bound

logger = get_logger(__name__)

DateInput = Union[str, date, datetime, None]


def build_cache_key(prefix: str, params: Dict[str, Any]) -> str:
    """
    Derive a cache key from the exact query parameters.

    Parameters are serialized as canonical JSON and hashed, so values such as
    an event literally named "all" never collide with an absent filter.
    """
    canonical = json.dumps(params, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return f"{prefix}:{digest}"


class AnalyticsService:
    """Service computing aggregate views over the event store, read through a cache."""

    def __init__(
        self,
        db_session: Session,
        cache: Optional[CacheBackend] = None,
        ttl_seconds: Optional[int] = None,
        recent_limit: Optional[int] = None,
    ):
        self.db = db_session
        self.events_repo = EventRepository(db_session)
        self.cache = cache if cache is not None else NullCache()
        self.ttl = ttl_seconds if ttl_seconds is not None else settings.CACHE_TTL_SECONDS
        self.recent_limit = recent_limit if recent_limit is not None else settings.RECENT_EVENTS_LIMIT

    def _read_through(self, key: str, compute: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
        """Return the cached value for key, or compute, cache and return it."""
        cached = self.cache.get(key)
        if cached is not None:
            try:
                return json.loads(cached)
            except (TypeError, ValueError) as e:
                logger.warning(f"Discarding unreadable cache entry {key}: {e}")

        result = compute()
        self.cache.set(key, json.dumps(result, separators=(",", ":")).encode("utf-8"), self.ttl)
        return result

    def get_event_summary(
        self,
        event: Optional[str] = None,
        app_id: Optional[str] = None,
        start_date: DateInput = None,
        end_date: DateInput = None,
    ) -> Dict[str, Any]:
        """
        Get count, unique users and device breakdown for matching events.

        Args:
            event: Optional event name filter
            app_id: Optional application filter; ignored when not a valid id
            start_date: Optional inclusive lower bound (ISO date or datetime)
            end_date: Optional inclusive upper bound; a bare date covers the whole day

        Returns:
            Dictionary shaped {event, count, uniqueUsers, deviceData}

        Raises:
            ValidationError: If a date bound cannot be parsed
        """
        app_uuid = None
        if app_id:
            try:
                app_uuid = UUID(str(app_id))
            except ValueError:
                logger.debug(f"Ignoring malformed app_id filter: {app_id!r}")

        try:
            start = parse_bound(start_date)
            end = parse_bound(end_date, end_of_day=True)
        except ValueError as e:
            raise ValidationError("startDate and endDate must be ISO-8601 dates") from e

        key = build_cache_key("evsum", {
            "event": event,
            "app_id": str(app_uuid) if app_uuid else None,
            "start": start.isoformat() if start else None,
            "end": end.isoformat() if end else None,
        })

        return self._read_through(
            key, lambda: self._compute_event_summary(event, app_uuid, start, end)
        )

    def _compute_event_summary(
        self,
        event: Optional[str],
        app_id: Optional[UUID],
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> Dict[str, Any]:
        base_query = self.events_repo.filter_query(event=event, app_id=app_id, start=start, end=end)

        # One group per event name; the busiest group is reported
        top = base_query.with_entities(
            Event.event.label("event"),
            func.count(Event.id).label("count"),
            func.count(func.distinct(Event.user_id)).label("unique_users"),
        ).group_by(Event.event).order_by(
            desc(func.count(Event.id)), Event.event
        ).first()

        if top is None:
            return EventSummary(event=event).model_dump(mode="json", by_alias=True)

        device_rows = base_query.filter(
            Event.event == top.event,
            Event.device.isnot(None),
        ).with_entities(
            Event.device,
            func.count(Event.id).label("count"),
        ).group_by(Event.device).all()

        summary = EventSummary(
            event=top.event,
            count=top.count,
            unique_users=top.unique_users,
            device_data={device: count for device, count in device_rows},
        )
        return summary.model_dump(mode="json", by_alias=True)

    def get_user_stats(self, user_id: Optional[str]) -> Dict[str, Any]:
        """
        Get lifetime count and recent activity for one user.

        Args:
            user_id: User identifier (required)

        Returns:
            Dictionary shaped {userId, totalEvents, recentEvents, deviceDetails, ipAddress}

        Raises:
            ValidationError: If user_id is missing
        """
        if not user_id:
            raise ValidationError("userId required")

        key = build_cache_key("ustats", {"user_id": user_id})
        return self._read_through(key, lambda: self._compute_user_stats(user_id))

    def _compute_user_stats(self, user_id: str) -> Dict[str, Any]:
        recent_events = self.events_repo.list_recent_for_user(user_id, limit=self.recent_limit)
        total_events = self.events_repo.count_for_user(user_id)

        # Walk newest -> oldest; later (older) events overwrite browser/os
        device_details: Dict[str, Any] = {}
        ip_addresses = []
        for e in recent_events:
            metadata = e.event_metadata if isinstance(e.event_metadata, dict) else {}
            if metadata.get("browser"):
                device_details["browser"] = metadata["browser"]
            if metadata.get("os"):
                device_details["os"] = metadata["os"]
            if e.ip_address and e.ip_address not in ip_addresses:
                ip_addresses.append(e.ip_address)

        stats = UserStats(
            user_id=user_id,
            total_events=total_events,
            recent_events=[EventOut.from_model(e) for e in recent_events],
            device_details=device_details,
            ip_address=ip_addresses[0] if ip_addresses else None,
        )
        return stats.model_dump(mode="json", by_alias=True)
