"""Pydantic schemas for application registration and API keys."""
from typing import Optional
from datetime import datetime
from uuid import UUID
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema using camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApplicationRegister(CamelModel):
    """Schema for registering an application."""
    name: Optional[str] = Field(None, description="Application name (required)")
    owner_email: Optional[str] = Field(None, description="Owner contact, usable for key lookup")
    expires_in_days: Optional[int] = Field(None, description="Key lifetime in days; never expires when omitted")
    federated_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("federatedToken", "googleIdToken", "federated_token"),
        description="ID token from a trusted identity provider"
    )


class ApplicationRegistered(CamelModel):
    """Schema returned after registration."""
    id: UUID
    api_key: str
    name: str
    expires_at: Optional[datetime] = None


class APIKeyRequest(CamelModel):
    """Schema for requests that act on an existing key."""
    api_key: Optional[str] = Field(None, description="Current API key")


class APIKeyLookupResponse(CamelModel):
    """Schema for key lookup."""
    api_key: str
    revoked: bool
    expires_at: Optional[datetime] = None


class APIKeyRevokedResponse(BaseModel):
    message: str = "API key revoked"


class APIKeyRegeneratedResponse(CamelModel):
    api_key: str
