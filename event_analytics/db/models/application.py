"""SQLAlchemy model for registered applications and their API key."""
from uuid import uuid4
from sqlalchemy import (
    Column, String, DateTime, Boolean, UUID, Index, false
)
from sqlalchemy.sql import func

from event_analytics.db.base import Base


class Application(Base):
    """A registered client application. Holds exactly one active API key."""

    __tablename__ = "applications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    owner_email = Column(String(320), nullable=True)
    api_key = Column(String(64), nullable=False)
    revoked = Column(Boolean, nullable=False, default=False, server_default=false())
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    federated_subject = Column(String(255), nullable=True)  # "sub" claim of a verified ID token

    __table_args__ = (
        Index("ix_applications_api_key", "api_key", unique=True),
        Index("ix_applications_owner_email", "owner_email"),
    )

    def __repr__(self):
        return f"<Application(id={self.id}, name={self.name}, revoked={self.revoked})>"
