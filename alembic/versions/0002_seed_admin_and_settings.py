"""seed_admin_and_settings

Revision ID: 0002_seed_admin_and_settings
Revises: 0001_initial_schema
Create Date: 2026-10-01 10:05:00.000000

"""
from typing import Sequence, Union

from alembic import op
from sqlalchemy import text

from app.core.security import hash_password

# revision identifiers, used by Alembic.
revision: str = '0002_seed_admin_and_settings'
down_revision: Union[str, None] = '0001_initial_schema'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DEFAULT_ADMIN_USERNAME = 'admin'
DEFAULT_ADMIN_EMAIL = 'admin@example.com'
DEFAULT_ADMIN_PASSWORD = 'admin123'  # change after first login


def upgrade() -> None:
    """Insert the bootstrap admin account and a default settings row (skipped when present)."""
    connection = op.get_bind()

    exists = connection.execute(
        text("SELECT id FROM admin_users WHERE username = :username"),
        {"username": DEFAULT_ADMIN_USERNAME},
    ).scalar()
    if not exists:
        connection.execute(
            text("""
                INSERT INTO admin_users (username, email, password_hash, role, is_active)
                VALUES (:username, :email, :password_hash, 'admin', :is_active)
            """),
            {
                "username": DEFAULT_ADMIN_USERNAME,
                "email": DEFAULT_ADMIN_EMAIL,
                "password_hash": hash_password(DEFAULT_ADMIN_PASSWORD),
                "is_active": True,
            },
        )

    has_settings = connection.execute(text("SELECT COUNT(*) FROM invitation_settings")).scalar()
    if not has_settings:
        connection.execute(
            text("""
                INSERT INTO invitation_settings (rsvp_enabled, is_published, thank_you_page_enabled)
                VALUES (:rsvp_enabled, :is_published, :thank_you_page_enabled)
            """),
            {"rsvp_enabled": True, "is_published": False, "thank_you_page_enabled": False},
        )


def downgrade() -> None:
    op.execute(f"DELETE FROM admin_users WHERE username = '{DEFAULT_ADMIN_USERNAME}';")
