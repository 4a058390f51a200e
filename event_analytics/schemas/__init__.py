from .application import (
    ApplicationRegister,
    ApplicationRegistered,
    APIKeyRequest,
    APIKeyLookupResponse,
    APIKeyRevokedResponse,
    APIKeyRegeneratedResponse,
)
from .event import EventCreate, EventRecorded, EventOut
from .analytics import EventSummary, UserStats

__all__ = [
    "ApplicationRegister",
    "ApplicationRegistered",
    "APIKeyRequest",
    "APIKeyLookupResponse",
    "APIKeyRevokedResponse",
    "APIKeyRegeneratedResponse",
    "EventCreate",
    "EventRecorded",
    "EventOut",
    "EventSummary",
    "UserStats",
]
