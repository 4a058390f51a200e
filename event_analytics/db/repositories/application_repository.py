# event_analytics/db/repositories/application_repository.py
from datetime import datetime
from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from event_analytics.core.exceptions import StoreError
from event_analytics.core.logging import get_logger
from event_analytics.db.models.application import Application

logger = get_logger(__name__)


class ApplicationRepository:
    """Repository for CRUD operations on Application model"""

    def __init__(self, db_session: Session):
        self.db_session = db_session

    def _commit(self, action: str) -> None:
        try:
            self.db_session.commit()
        except SQLAlchemyError as e:
            self.db_session.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise StoreError() from e

    def get_by_id(self, app_id: UUID) -> Optional[Application]:
        """Get application by ID"""
        return (
            self.db_session.query(Application)
            .filter(Application.id == app_id)
            .first()
        )

    def get_by_api_key(self, api_key: str) -> Optional[Application]:
        """Get application by its current API key"""
        return (
            self.db_session.query(Application)
            .filter(Application.api_key == api_key)
            .first()
        )

    def get_by_owner_email(self, owner_email: str) -> Optional[Application]:
        """Get the first application registered to an owner email"""
        return (
            self.db_session.query(Application)
            .filter(Application.owner_email == owner_email)
            .order_by(Application.created_at)
            .first()
        )

    def api_key_exists(self, api_key: str) -> bool:
        return (
            self.db_session.query(Application.id)
            .filter(Application.api_key == api_key)
            .first()
            is not None
        )

    def create(
        self,
        name: str,
        api_key: str,
        owner_email: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        federated_subject: Optional[str] = None,
    ) -> Application:
        """Create a new application record"""
        application = Application(
            name=name,
            owner_email=owner_email,
            api_key=api_key,
            revoked=False,
            expires_at=expires_at,
            federated_subject=federated_subject,
        )
        self.db_session.add(application)
        self._commit("create application")
        self.db_session.refresh(application)
        return application

    def update_by_api_key(self, api_key: str, values: dict) -> Optional[Application]:
        """
        Apply a single-row UPDATE matched on the current API key.

        Args:
            api_key: Key the row must currently hold
            values: Column values to set

        Returns:
            The updated application, or None if no row holds the key
        """
        updated = (
            self.db_session.query(Application)
            .filter(Application.api_key == api_key)
            .update(values, synchronize_session=False)
        )
        self._commit("update application")
        if not updated:
            return None

        current_key = values.get("api_key", api_key)
        application = self.get_by_api_key(current_key)
        if application is not None:
            self.db_session.refresh(application)
        return application
