"""
User Model for RBAC (Role-Based Access Control).

SQLAlchemy 2.0 ORM model for system users (actors) with role management.

Design:
    - Opaque string ids (UUID4 text), stable for the life of the account
    - Role-based: ADMIN, DOCTOR, SECRETARY, PROMOTER, PATIENT
    - Soft state only: status ACTIVE/INACTIVE, never hard-deleted
    - Linked resource: patient-role users point at their clinical record
"""
from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    DateTime,
    Index,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.session import Base
from .enums import UserRole, UserStatus

if TYPE_CHECKING:
    from .notification import Notification, NotificationPreference


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """
    User entity for authentication and authorization.

    Every authenticated request resolves to one row here; the row is
    re-read on each request so role and status changes apply immediately.

    Attributes:
        id: Opaque primary key (UUID text)
        email: Unique, lowercase email address
        full_name: Optional display name
        role: admin, doctor, secretary, promoter, patient
        status: active or inactive (inactive until administrator approval)
        linked_resource_id: Patient record id for patient-role users
        created_at: Record creation timestamp
        updated_at: Record update timestamp
        last_seen_at: Last authenticated request

    Access Control:
        - Capabilities come from the static permission table for ``role``
        - A patient with status inactive or no linked record is restricted
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="Login email address (stored lowercase)"
    )
    full_name: Mapped[str | None] = mapped_column(
        String(200),
        nullable=True,
    )

    # Authorization
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.PATIENT.value,
        index=True,
        comment="User role: admin, doctor, secretary, promoter, patient"
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserStatus.INACTIVE.value,
        index=True,
        comment="Account status: active, inactive"
    )
    linked_resource_id: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        index=True,
        comment="Linked patient record id (patient-role users)"
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
    )
    last_seen_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Last authenticated request timestamp"
    )

    notifications: Mapped[list["Notification"]] = relationship(
        "Notification",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )
    notification_preference: Mapped["NotificationPreference | None"] = relationship(
        "NotificationPreference",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
        lazy="raise",
    )

    __table_args__ = (
        Index("ix_users_role_status", "role", "status"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, role='{self.role}', status='{self.status}')>"

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value
