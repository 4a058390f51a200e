"""Event ingestion and aggregate analytics endpoints."""
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query, Request, status

from event_analytics.core.auth import api_key_auth
from event_analytics.core.dependencies import Analytics, IngestService
from event_analytics.db.models.application import Application
from event_analytics.schemas.event import EventCreate, EventRecorded

analytics_router = APIRouter(prefix="/analytics")


@analytics_router.post(
    "/collect",
    response_model=EventRecorded,
    status_code=status.HTTP_201_CREATED,
    summary="Record an analytics event",
    responses={
        400: {"description": "event required"},
        401: {"description": "API key missing"},
        403: {"description": "Invalid, revoked or expired API key"},
    },
)
def collect_event(
    request: Request,
    payload: EventCreate,
    service: IngestService,
    application: Application = Depends(api_key_auth),
):
    """
    Record one event for the application owning the presented API key.

    Send the key as `x-api-key` header (or `api_key` query parameter).
    """
    client_ip = request.client.host if request.client else None
    service.ingest(application, payload, client_ip=client_ip)
    return EventRecorded()


@analytics_router.get(
    "/event-summary",
    response_model=Dict[str, Any],
    summary="Summary statistics for an event",
)
def event_summary(
    service: Analytics,
    event: Optional[str] = Query(None, description="Event name"),
    start_date: Optional[str] = Query(None, alias="startDate", description="Inclusive start (YYYY-MM-DD or ISO 8601)"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Inclusive end (YYYY-MM-DD or ISO 8601)"),
    app_id: Optional[str] = Query(None, description="Application ID"),
):
    """
    Get count, unique users and per-device counts for matching events.

    Results may be up to 30 seconds stale.
    """
    return service.get_event_summary(
        event=event,
        app_id=app_id,
        start_date=start_date,
        end_date=end_date,
    )


@analytics_router.get(
    "/user-stats",
    response_model=Dict[str, Any],
    summary="Activity statistics for a user",
)
def user_stats(
    service: Analytics,
    user_id: Optional[str] = Query(None, alias="userId", description="User identifier"),
):
    """
    Get lifetime event count, the 20 most recent events, device details and an IP address.

    Results may be up to 30 seconds stale.
    """
    return service.get_user_stats(user_id)
