"""Initial Greenhouse identity schema.

Members, their connected provider accounts, registered apps and the
credentials issued to those apps. Uniqueness of member email/username, of the
(member, provider) link, of app API keys and of issued access tokens is
enforced here rather than in application code.
"""

from __future__ import annotations

from typing import Optional

import sqlalchemy as sa
from alembic import op

# Revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision: Optional[str] = None
branch_labels: Optional[str] = None
depends_on: Optional[str] = None


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def upgrade() -> None:
    _create_member()
    _create_connected_account()
    _create_app()
    _create_app_connection()


def downgrade() -> None:
    op.drop_table("app_connection")
    op.drop_table("app")
    op.drop_table("connected_account")
    op.drop_table("member")


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def _timestamps() -> tuple[sa.Column, sa.Column]:
    return (
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )


def _create_member() -> None:
    op.create_table(
        "member",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("email_canonical", sa.String(length=320), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=True),
        sa.Column("username_canonical", sa.String(length=100), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("gender", sa.String(length=10), nullable=False),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column(
            "picture_set",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="member_pkey"),
        sa.UniqueConstraint("email_canonical", name="member_email_canonical_key"),
        sa.UniqueConstraint("username_canonical", name="member_username_canonical_key"),
        sqlite_autoincrement=True,
    )


def _create_connected_account() -> None:
    op.create_table(
        "connected_account",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("provider", sa.String(length=64), nullable=False),
        sa.Column("access_token_encrypted", sa.Text(), nullable=False),
        sa.Column("access_token_digest", sa.String(length=64), nullable=False),
        sa.Column("provider_account_id", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="connected_account_pkey"),
        sa.ForeignKeyConstraint(
            ["member_id"],
            ["member.id"],
            name="connected_account_member_id_fkey",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint(
            "member_id",
            "provider",
            name="connected_account_member_id_provider_key",
        ),
    )
    op.create_index(
        "ix_connected_account_provider_token",
        "connected_account",
        ["provider", "access_token_digest"],
        unique=False,
    )
    op.create_index(
        "ix_connected_account_provider_account",
        "connected_account",
        ["provider", "provider_account_id"],
        unique=False,
    )


def _create_app() -> None:
    op.create_table(
        "app",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("api_key", sa.String(length=64), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="app_pkey"),
        sa.UniqueConstraint("api_key", name="app_api_key_key"),
    )


def _create_app_connection() -> None:
    op.create_table(
        "app_connection",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("app_id", sa.Integer(), nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("access_token", sa.String(length=255), nullable=False),
        sa.Column("secret_encrypted", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="app_connection_pkey"),
        sa.ForeignKeyConstraint(
            ["app_id"],
            ["app.id"],
            name="app_connection_app_id_fkey",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["member_id"],
            ["member.id"],
            name="app_connection_member_id_fkey",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("access_token", name="app_connection_access_token_key"),
    )
    op.create_index(
        "ix_app_connection_member_app",
        "app_connection",
        ["member_id", "app_id"],
        unique=False,
    )
