"""Application registration and API key lifecycle endpoints."""
from typing import Optional
from fastapi import APIRouter, Query, status

from event_analytics.core.dependencies import KeyService
from event_analytics.core.exceptions import NotFound
from event_analytics.schemas.application import (
    ApplicationRegister,
    ApplicationRegistered,
    APIKeyRequest,
    APIKeyLookupResponse,
    APIKeyRevokedResponse,
    APIKeyRegeneratedResponse,
)
from event_analytics.utils.timeutils import ensure_utc

auth_router = APIRouter(
    prefix="/auth",
    responses={400: {"description": "Invalid input"}},
)


@auth_router.post(
    "/register",
    response_model=ApplicationRegistered,
    status_code=status.HTTP_201_CREATED,
    summary="Register an application",
)
def register_application(payload: ApplicationRegister, service: KeyService):
    """
    Register an application and issue its API key.

    - **name**: required
    - **ownerEmail**: optional, usable for key lookup
    - **expiresInDays**: optional key lifetime
    - **federatedToken** / **googleIdToken**: optional ID token to verify
    """
    application = service.register(
        name=payload.name,
        owner_email=payload.owner_email,
        expires_in_days=payload.expires_in_days,
        federated_token=payload.federated_token,
    )
    return ApplicationRegistered(
        id=application.id,
        api_key=application.api_key,
        name=application.name,
        expires_at=ensure_utc(application.expires_at),
    )


@auth_router.get(
    "/api-key",
    response_model=APIKeyLookupResponse,
    summary="Look up an application's API key",
    responses={404: {"description": "App not found"}},
)
def get_api_key(
    service: KeyService,
    app_id: Optional[str] = Query(None, alias="appId", description="Application ID"),
    owner_email: Optional[str] = Query(None, alias="ownerEmail", description="Owner email"),
):
    """Look up the current key by application ID or owner email (at least one required)."""
    application = service.find_application(app_id=app_id, owner_email=owner_email)
    if application is None:
        raise NotFound("App not found")

    return APIKeyLookupResponse(
        api_key=application.api_key,
        revoked=application.revoked,
        expires_at=ensure_utc(application.expires_at),
    )


@auth_router.post(
    "/revoke",
    response_model=APIKeyRevokedResponse,
    summary="Revoke an API key",
    responses={404: {"description": "API key not found"}},
)
def revoke_api_key(payload: APIKeyRequest, service: KeyService):
    service.revoke(payload.api_key)
    return APIKeyRevokedResponse()


@auth_router.post(
    "/regenerate",
    response_model=APIKeyRegeneratedResponse,
    summary="Replace an API key with a new one",
    responses={404: {"description": "API key not found"}},
)
def regenerate_api_key(payload: APIKeyRequest, service: KeyService):
    """Issue a new key for the application holding the given key. Also clears revocation."""
    application = service.regenerate(payload.api_key)
    return APIKeyRegeneratedResponse(api_key=application.api_key)
