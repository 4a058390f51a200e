"""Service for the application registry and API key lifecycle."""
from typing import Optional
from datetime import timedelta
from uuid import UUID
from sqlalchemy.orm import Session

from event_analytics.core.exceptions import (
    Forbidden, LookupKeyMissing, NotFound, Unauthorized, ValidationError
)
from event_analytics.core.logging import get_logger, mask_api_key
from event_analytics.db.models.application import Application
from event_analytics.db.repositories.application_repository import ApplicationRepository
from event_analytics.services.federated_identity_service import (
    FederatedTokenVerifier, get_federated_verifier
)
from event_analytics.utils.api_key import generate_api_key, is_api_key_format
from event_analytics.utils.timeutils import ensure_utc, utcnow

logger = get_logger(__name__)

MAX_KEY_ATTEMPTS = 5


class APIKeyService:
    """Service for application registration and API key management."""

    def __init__(self, db_session: Session, verifier: Optional[FederatedTokenVerifier] = None):
        self.db = db_session
        self.repository = ApplicationRepository(db_session)
        self.verifier = verifier

    def _new_unique_key(self) -> str:
        for _ in range(MAX_KEY_ATTEMPTS):
            api_key = generate_api_key()
            if not self.repository.api_key_exists(api_key):
                return api_key
            logger.warning("Generated API key collided with an existing key, retrying")
        raise RuntimeError("Could not generate a unique API key")

    def register(
        self,
        name: Optional[str],
        owner_email: Optional[str] = None,
        expires_in_days: Optional[int] = None,
        federated_token: Optional[str] = None,
    ) -> Application:
        """
        Register a new application and issue its first API key.

        Args:
            name: Application name (required, non-empty)
            owner_email: Optional owner contact, usable for key lookup
            expires_in_days: Optional key lifetime; no expiry when omitted or 0
            federated_token: Optional ID token proving the owner's identity

        Returns:
            The created Application

        Raises:
            ValidationError: If name is missing or expires_in_days is negative
            AuthTokenInvalid: If a supplied federated token fails verification
        """
        if not name or not name.strip():
            raise ValidationError("name required")
        if expires_in_days is not None and expires_in_days < 0:
            raise ValidationError("expiresInDays must not be negative")

        federated_subject = None
        if federated_token:
            verifier = self.verifier or get_federated_verifier()
            federated_subject = verifier.verify(federated_token)

        expires_at = utcnow() + timedelta(days=expires_in_days) if expires_in_days else None

        application = self.repository.create(
            name=name.strip(),
            api_key=self._new_unique_key(),
            owner_email=owner_email or None,
            expires_at=expires_at,
            federated_subject=federated_subject,
        )

        logger.info(f"Registered application '{application.name}' ({application.id})")
        return application

    def find_by_app_id(self, app_id) -> Optional[Application]:
        """Get application by ID. A malformed ID matches nothing."""
        if not isinstance(app_id, UUID):
            try:
                app_id = UUID(str(app_id))
            except ValueError:
                return None
        return self.repository.get_by_id(app_id)

    def find_by_owner_email(self, owner_email: str) -> Optional[Application]:
        """Get application by owner email."""
        return self.repository.get_by_owner_email(owner_email)

    def find_application(
        self,
        app_id: Optional[str] = None,
        owner_email: Optional[str] = None,
    ) -> Optional[Application]:
        """
        Look up an application by ID, falling back to owner email.

        Raises:
            LookupKeyMissing: If neither lookup key is given
        """
        if not app_id and not owner_email:
            raise LookupKeyMissing("appId or ownerEmail required")
        if app_id:
            return self.find_by_app_id(app_id)
        return self.find_by_owner_email(owner_email)

    def revoke(self, api_key: Optional[str]) -> Application:
        """
        Mark an API key as revoked.

        Raises:
            ValidationError: If no key is given
            NotFound: If no application holds the key
        """
        if not api_key:
            raise ValidationError("apiKey required")

        application = self.repository.update_by_api_key(api_key, {"revoked": True})
        if application is None:
            raise NotFound("API key not found")

        logger.info(f"Revoked API key {mask_api_key(api_key)} for application {application.id}")
        return application

    def regenerate(self, api_key: Optional[str]) -> Application:
        """
        Replace an API key with a fresh one and clear its revoked flag.

        Raises:
            ValidationError: If no key is given
            NotFound: If no application holds the key
        """
        if not api_key:
            raise ValidationError("apiKey required")

        new_key = self._new_unique_key()
        application = self.repository.update_by_api_key(
            api_key, {"api_key": new_key, "revoked": False}
        )
        if application is None:
            raise NotFound("API key not found")

        logger.info(
            f"Regenerated API key {mask_api_key(api_key)} -> {mask_api_key(new_key)} "
            f"for application {application.id}"
        )
        return application

    def validate_api_key(self, api_key: Optional[str]) -> Application:
        """
        Resolve an inbound API key to its application.

        Evaluated on every call; validity is never cached.

        Raises:
            Unauthorized: If no key is presented
            Forbidden: If the key is unknown, revoked or expired
        """
        if not api_key:
            raise Unauthorized("API key missing")

        # Malformed keys are rejected without a store lookup
        application = None
        if is_api_key_format(api_key):
            application = self.repository.get_by_api_key(api_key)
        if application is None or application.revoked:
            logger.warning(f"Rejected invalid or revoked API key {mask_api_key(api_key)}")
            raise Forbidden("Invalid or revoked API key")

        expires_at = ensure_utc(application.expires_at)
        if expires_at and expires_at < utcnow():
            logger.warning(f"Rejected expired API key {mask_api_key(api_key)}")
            raise Forbidden("API key expired")

        return application
