"""initial schema

Revision ID: b7c1e9d2a4f0
Revises:
Create Date: 2026-10-19 09:00:00.000000

Creates:
1. users - student accounts with hashed one-time codes
2. admins - dashboard accounts with the admin_role enum
3. applications - submitted application forms (JSONB content)
4. audit_logs - append-only event log
5. synced_courses - courses added by the admin sync
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "b7c1e9d2a4f0"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _base_columns() -> list[sa.Column]:
    """Primary key and timestamps (from BaseModel)."""
    return [
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    admin_role_enum = postgresql.ENUM("super_admin", "editor", name="admin_role", create_type=False)
    admin_role_enum.create(op.get_bind(), checkfirst=True)

    application_status_enum = postgresql.ENUM(
        "draft", "submitted", name="application_status", create_type=False
    )
    application_status_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        *_base_columns(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("id_number", sa.String(length=13), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("province", sa.String(length=50), nullable=True),
        sa.Column("high_school", sa.String(length=200), nullable=True),
        sa.Column("gender", sa.String(length=50), nullable=True),
        sa.Column("ethnicity", sa.String(length=50), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("otp_code_hash", sa.String(length=64), nullable=True),
        sa.Column("otp_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "admins",
        *_base_columns(),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("role", admin_role_enum, nullable=False, server_default="super_admin"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_admins_email", "admins", ["email"], unique=True)

    op.create_table(
        "applications",
        *_base_columns(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("status", application_status_enum, nullable=False, server_default="submitted"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("content", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_applications_submitted_at", "applications", ["submitted_at"])
    op.create_index("ix_applications_user_submitted", "applications", ["user_id", "submitted_at"])

    op.create_table(
        "audit_logs",
        *_base_columns(),
        sa.Column("event_type", sa.String(length=50), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("details", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_event_type", "audit_logs", ["event_type"])
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])

    op.create_table(
        "synced_courses",
        *_base_columns(),
        sa.Column("institution_id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("prerequisites", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("institution_id", "name", name="uq_synced_courses_institution_name"),
    )
    op.create_index("ix_synced_courses_institution_id", "synced_courses", ["institution_id"])


def downgrade() -> None:
    op.drop_index("ix_synced_courses_institution_id", table_name="synced_courses")
    op.drop_table("synced_courses")

    op.drop_index("ix_audit_logs_user_id", table_name="audit_logs")
    op.drop_index("ix_audit_logs_event_type", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_applications_user_submitted", table_name="applications")
    op.drop_index("ix_applications_submitted_at", table_name="applications")
    op.drop_table("applications")

    op.drop_index("ix_admins_email", table_name="admins")
    op.drop_table("admins")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    sa.Enum(name="application_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="admin_role").drop(op.get_bind(), checkfirst=True)
