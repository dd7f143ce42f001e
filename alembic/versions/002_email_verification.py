"""Email verification state on profiles.

Adds profiles.email_verified_at. Null means the address was never confirmed.

Revision ID: 002_email_verification
Revises: 001_profiles
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "002_email_verification"
down_revision: str | None = "001_profiles"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Add the verification timestamp."""
    op.add_column("profiles", sa.Column("email_verified_at", sa.DateTime(timezone=True), nullable=True))


def downgrade() -> None:
    """Drop the verification timestamp."""
    op.drop_column("profiles", "email_verified_at")
