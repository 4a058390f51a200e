"""Authentication dependency gating event ingestion on a valid API key."""
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader, APIKeyQuery
from sqlalchemy.orm import Session

from event_analytics.core.dependencies import get_db
from event_analytics.core.logging import get_logger, mask_api_key
from event_analytics.db.models.application import Application
from event_analytics.services.api_key_service import APIKeyService

logger = get_logger(__name__)

api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)
api_key_query = APIKeyQuery(name="api_key", auto_error=False)


class APIKeyAuth:
    """API key authentication via the x-api-key header or api_key query parameter."""

    def __call__(
        self,
        request: Request,
        header_key: Optional[str] = Depends(api_key_header),
        query_key: Optional[str] = Depends(api_key_query),
        db: Session = Depends(get_db)
    ) -> Application:
        """
        Validate the presented API key.

        Re-evaluated on every request; nothing about key validity is cached.

        Args:
            request: FastAPI request object
            header_key: Key from the x-api-key header
            query_key: Key from the api_key query parameter
            db: Database session

        Returns:
            The Application owning the key

        Raises:
            Unauthorized: If no key was presented
            Forbidden: If the key is unknown, revoked or expired
        """
        api_key = header_key or query_key

        application = APIKeyService(db).validate_api_key(api_key)
        logger.debug(f"Authenticated {mask_api_key(api_key)} as application {application.id}")

        # Store application in request state for later use
        request.state.application = application
        return application


api_key_auth = APIKeyAuth()
