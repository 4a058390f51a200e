from typing import Annotated
from fastapi import Depends
from sqlalchemy.orm import Session

from event_analytics.db.base import SessionLocal
from event_analytics.services.analytics_service import AnalyticsService
from event_analytics.services.api_key_service import APIKeyService
from event_analytics.services.cache_service import CacheBackend, get_cache_service
from event_analytics.services.event_service import EventService
from event_analytics.services.federated_identity_service import (
    FederatedTokenVerifier, get_federated_verifier
)


def get_db():
    """FastAPI dependency for database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_cache() -> CacheBackend:
    """FastAPI dependency for the shared cache backend"""
    return get_cache_service()


def get_verifier() -> FederatedTokenVerifier:
    """FastAPI dependency for the federated token verifier"""
    return get_federated_verifier()


def get_api_key_service(
    db: Session = Depends(get_db),
    verifier: FederatedTokenVerifier = Depends(get_verifier),
) -> APIKeyService:
    """Get API key service bound to the request's session"""
    return APIKeyService(db, verifier=verifier)


def get_event_service(db: Session = Depends(get_db)) -> EventService:
    """Get event ingestion service bound to the request's session"""
    return EventService(db)


def get_analytics_service(
    db: Session = Depends(get_db),
    cache: CacheBackend = Depends(get_cache),
) -> AnalyticsService:
    """Get analytics service bound to the request's session and the shared cache"""
    return AnalyticsService(db, cache=cache)


# Type aliases for dependency injection
DbSession = Annotated[Session, Depends(get_db)]
KeyService = Annotated[APIKeyService, Depends(get_api_key_service)]
IngestService = Annotated[EventService, Depends(get_event_service)]
Analytics = Annotated[AnalyticsService, Depends(get_analytics_service)]
