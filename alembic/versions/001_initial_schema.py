"""Initial schema.

Revision ID: 001
Revises: None
Create Date: 2026-10-18

Running ``alembic upgrade head`` on a clean database applies the whole
schema of the access and notifications service.

Tables created
--------------
- users                    : actors (role, status, linked patient record)
- notifications            : per-user notifications, owner-scoped
- notification_preferences : one row of delivery preferences per user

No seed data: the first administrator is created with
``scripts/create_admin.py``.

Rollback
--------
``downgrade()`` drops indexes and tables leaf → root.
"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # =======================================================================
    # 1. USERS
    # =======================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, comment="Login email address (stored lowercase)"),
        sa.Column("full_name", sa.String(200), nullable=True),
        sa.Column(
            "role",
            sa.String(20),
            nullable=False,
            server_default="patient",
            comment="User role: admin, doctor, secretary, promoter, patient",
        ),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default="inactive",
            comment="Account status: active, inactive",
        ),
        sa.Column(
            "linked_resource_id",
            sa.String(64),
            nullable=True,
            comment="Linked patient record id (patient-role users)",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "last_seen_at",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="Last authenticated request timestamp",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "role IN ('admin', 'doctor', 'secretary', 'promoter', 'patient')",
            name="ck_users_role",
        ),
        sa.CheckConstraint("status IN ('active', 'inactive')", name="ck_users_status"),
    )

    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_status", "users", ["status"])
    op.create_index("ix_users_linked_resource_id", "users", ["linked_resource_id"])
    op.create_index("ix_users_role_status", "users", ["role", "status"])

    # =======================================================================
    # 2. NOTIFICATIONS
    # =======================================================================
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column(
            "owner_actor_id",
            sa.String(36),
            nullable=False,
            comment="Owning user; notifications are never shared or transferred",
        ),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("channel", sa.String(20), nullable=False, server_default="in_app"),
        sa.Column("status", sa.String(20), nullable=False, server_default="sent"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("priority", sa.String(10), nullable=False, server_default="medium"),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("data", sa.JSON(), nullable=True),
        sa.Column("action_url", sa.String(500), nullable=True),
        sa.Column("action_text", sa.String(100), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["owner_actor_id"], ["users.id"], ondelete="CASCADE"),
        # Read flag, status and read timestamp move together.
        sa.CheckConstraint(
            "(is_read AND status = 'read' AND read_at IS NOT NULL) OR (NOT is_read AND status <> 'read')",
            name="ck_notifications_read_state",
        ),
    )

    op.create_index("ix_notifications_owner_actor_id", "notifications", ["owner_actor_id"])
    op.create_index("ix_notifications_owner_created", "notifications", ["owner_actor_id", "created_at"])
    op.create_index("ix_notifications_owner_read", "notifications", ["owner_actor_id", "is_read"])

    # =======================================================================
    # 3. NOTIFICATION_PREFERENCES
    # =======================================================================
    op.create_table(
        "notification_preferences",
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("email_enabled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("sms_enabled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("push_enabled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("appointment_reminders", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("payment_notifications", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("system_alerts", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("marketing_emails", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("user_id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )


def downgrade() -> None:
    """Drop everything in reverse dependency order."""
    op.drop_table("notification_preferences")

    op.drop_index("ix_notifications_owner_read", table_name="notifications")
    op.drop_index("ix_notifications_owner_created", table_name="notifications")
    op.drop_index("ix_notifications_owner_actor_id", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_users_role_status", table_name="users")
    op.drop_index("ix_users_linked_resource_id", table_name="users")
    op.drop_index("ix_users_status", table_name="users")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
