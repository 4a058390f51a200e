"""create_applications_and_events

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the application registry and the event log."""
    op.create_table(
        'applications',
        sa.Column('id', sa.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('owner_email', sa.String(320), nullable=True),
        sa.Column('api_key', sa.String(64), nullable=False),
        sa.Column('revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('federated_subject', sa.String(255), nullable=True),
    )
    op.create_index('ix_applications_api_key', 'applications', ['api_key'], unique=True)
    op.create_index('ix_applications_owner_email', 'applications', ['owner_email'])

    op.create_table(
        'events',
        sa.Column('id', sa.UUID(as_uuid=True), primary_key=True),
        sa.Column('app_id', sa.UUID(as_uuid=True), nullable=False),
        sa.Column('api_key', sa.String(64), nullable=False),
        sa.Column('event', sa.String(255), nullable=False),
        sa.Column('url', sa.String(2048)),
        sa.Column('referrer', sa.String(2048)),
        sa.Column('device', sa.String(255)),
        sa.Column('ip_address', sa.String(45)),
        sa.Column('user_id', sa.String(255)),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('metadata', sa.JSON().with_variant(JSONB, 'postgresql'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_events_event_timestamp', 'events', ['event', 'timestamp'])
    op.create_index('ix_events_app_event_timestamp', 'events', ['app_id', 'event', 'timestamp'])
    op.create_index('ix_events_user_id', 'events', ['user_id'])
    op.create_index('ix_events_app_id', 'events', ['app_id'])
    op.create_index('ix_events_api_key', 'events', ['api_key'])
    op.create_index('ix_events_timestamp', 'events', ['timestamp'])


def downgrade() -> None:
    """Drop the event log and the application registry."""
    op.drop_table('events')
    op.drop_table('applications')
