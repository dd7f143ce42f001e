"""Profiles, credentials and user settings.

Creates profiles (with the role check), user_passwords and user_settings.

Revision ID: 001_profiles
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "001_profiles"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the account tables."""
    # --- profiles ---
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("role", sa.String(16), server_default="user", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("role IN ('user', 'moderator', 'admin')", name="ck_profiles_role"),
    )
    op.execute("CREATE UNIQUE INDEX ix_profiles_email_lower ON profiles (lower(email))")
    op.create_index("ix_profiles_role", "profiles", ["role"])

    # --- user_passwords ---
    op.create_table(
        "user_passwords",
        sa.Column(
            "user_id",
            sa.String(64),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # --- user_settings ---
    op.create_table(
        "user_settings",
        sa.Column(
            "user_id",
            sa.String(64),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("locale", sa.String(8), server_default="en", nullable=False),
        sa.Column("theme", sa.String(16), server_default="light", nullable=False),
        sa.Column("notifications_enabled", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("email_notifications_enabled", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    """Drop the account tables."""
    op.drop_table("user_settings")
    op.drop_table("user_passwords")
    op.drop_index("ix_profiles_role", table_name="profiles")
    op.execute("DROP INDEX IF EXISTS ix_profiles_email_lower")
    op.drop_table("profiles")
