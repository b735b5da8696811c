"""Create users, auth_tokens, applications and resumes tables

Revision ID: 001
Revises: None
Create Date: 2026-10-17 00:00:00.000000+00:00

What:  Initial schema for the tracker. Portable across PostgreSQL and SQLite
       (no dialect-specific column types).
Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _sync_stamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "deleted_at",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="Tombstone marker; NULL means the record is active",
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("username", sa.String(64), nullable=False, comment="Lowercased login name"),
        sa.Column("pin_hash", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )

    op.create_table(
        "auth_tokens",
        sa.Column("token_hash", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("token_hash"),
    )
    op.create_index("idx_auth_tokens_user", "auth_tokens", ["user_id"])

    # (user_id, id) primary key: client-generated ids only need to be unique
    # per owner. resume_id is deliberately not a foreign key.
    op.create_table(
        "applications",
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("company", sa.Text(), nullable=False),
        sa.Column("position", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'wishlist'")),
        sa.Column("applied_date", sa.String(32), nullable=True),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("resume_id", sa.String(64), nullable=True),
        *_sync_stamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "id"),
    )
    # Sync pull: WHERE user_id = ? AND updated_at > ? ORDER BY updated_at DESC
    op.create_index("idx_applications_user_updated", "applications", ["user_id", "updated_at"])

    op.create_table(
        "resumes",
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("file_name", sa.Text(), nullable=False),
        sa.Column("file_data", sa.Text(), nullable=False),
        sa.Column("file_type", sa.String(255), nullable=False),
        *_sync_stamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "id"),
    )
    op.create_index("idx_resumes_user_created", "resumes", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_index("idx_resumes_user_created", table_name="resumes")
    op.drop_table("resumes")
    op.drop_index("idx_applications_user_updated", table_name="applications")
    op.drop_table("applications")
    op.drop_index("idx_auth_tokens_user", table_name="auth_tokens")
    op.drop_table("auth_tokens")
    op.drop_table("users")
