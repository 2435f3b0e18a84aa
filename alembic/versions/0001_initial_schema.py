"""initial_schema

Revision ID: 0001_initial_schema
Revises: 
Create Date: 2026-10-01 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create invitations, analytics, message visibility, admin users, sessions and settings."""
    op.create_table(
        'invitations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('slug', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('lastname', sa.String(length=100), nullable=True),
        sa.Column('secondary_name', sa.String(length=100), nullable=True),
        sa.Column('secondary_lastname', sa.String(length=100), nullable=True),
        sa.Column('number_of_passes', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_confirmed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_invitations_id', 'invitations', ['id'])
    op.create_index('ix_invitations_slug', 'invitations', ['slug'], unique=True)

    op.create_table(
        'analytics',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('invitation_id', sa.Integer(), sa.ForeignKey('invitations.id', ondelete='SET NULL'), nullable=True),
        sa.Column('event_type', sa.String(length=64), nullable=False),
        sa.Column('event_data', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(length=100), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('referrer', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_analytics_id', 'analytics', ['id'])
    op.create_index('ix_analytics_invitation_id', 'analytics', ['invitation_id'])
    op.create_index('ix_analytics_event_type', 'analytics', ['event_type'])
    op.create_index('ix_analytics_timestamp', 'analytics', ['timestamp'])

    op.create_table(
        'message_visibility',
        sa.Column('analytics_id', sa.Integer(), sa.ForeignKey('analytics.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('hidden_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'admin_users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='editor'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('last_login', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_admin_users_id', 'admin_users', ['id'])
    op.create_index('ix_admin_users_username', 'admin_users', ['username'], unique=True)

    op.create_table(
        'sessions',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('admin_users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_sessions_user_id', 'sessions', ['user_id'])

    op.create_table(
        'invitation_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('event_date', sa.String(length=10), nullable=True),
        sa.Column('event_time', sa.String(length=5), nullable=True),
        sa.Column('rsvp_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('rsvp_deadline', sa.String(length=10), nullable=True),
        sa.Column('rsvp_phone', sa.String(length=30), nullable=True),
        sa.Column('rsvp_whatsapp', sa.String(length=30), nullable=True),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('thank_you_page_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_invitation_settings_id', 'invitation_settings', ['id'])


def downgrade() -> None:
    op.drop_table('invitation_settings')
    op.drop_table('sessions')
    op.drop_table('admin_users')
    op.drop_table('message_visibility')
    op.drop_table('analytics')
    op.drop_table('invitations')
