"""
Notification Models.

SQLAlchemy 2.0 ORM models for per-user notifications and the user's
delivery preferences.

Design:
    - Every notification belongs to exactly one owner (``owner_actor_id``)
    - ``is_read``, ``status == read`` and ``read_at`` move together
    - Deletion is a hard delete; there is no soft-delete column
"""
from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.session import Base
from .enums import (
    NotificationChannel,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)

if TYPE_CHECKING:
    from .user import User


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Notification(Base):
    """
    A message delivered to one actor.

    Attributes:
        id: Opaque primary key (UUID text)
        owner_actor_id: Owning user; every query filters on it
        type: NotificationType value
        channel: NotificationChannel value
        status: NotificationStatus value (created as ``sent``)
        title / message: Display content
        priority: low, medium, high, urgent
        is_read: Read flag, true iff status is ``read``
        data: Optional JSON payload for deep links and templating
        action_url / action_text: Optional call-to-action
        sent_at: When the notification was issued
        read_at: First time it was read; never cleared by the service
    """

    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)

    owner_actor_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owning user; notifications are never shared or transferred"
    )

    type: Mapped[str] = mapped_column(String(40), nullable=False)
    channel: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=NotificationChannel.IN_APP.value,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=NotificationStatus.SENT.value,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=NotificationPriority.MEDIUM.value,
    )
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    action_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    action_text: Mapped[str | None] = mapped_column(String(100), nullable=True)

    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
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

    owner: Mapped["User"] = relationship("User", back_populates="notifications", lazy="raise")

    __table_args__ = (
        Index("ix_notifications_owner_created", "owner_actor_id", "created_at"),
        Index("ix_notifications_owner_read", "owner_actor_id", "is_read"),
    )

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.id!r}, owner={self.owner_actor_id!r}, "
            f"type='{self.type}', status='{self.status}')>"
        )


class NotificationPreference(Base):
    """Per-user delivery preferences, one row per user."""

    __tablename__ = "notification_preferences"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # Channels
    email_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sms_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    push_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Categories
    appointment_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    payment_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    system_alerts: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    marketing_emails: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

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

    user: Mapped["User"] = relationship(
        "User", back_populates="notification_preference", lazy="raise"
    )

    def allows(self, notification_type: NotificationType, channel: NotificationChannel) -> bool:
        """Whether an event-driven notification of this type/channel may be delivered."""
        channel_flags = {
            NotificationChannel.EMAIL: self.email_enabled,
            NotificationChannel.SMS: self.sms_enabled,
            NotificationChannel.PUSH: self.push_enabled,
        }
        if not channel_flags.get(channel, True):
            return False

        category_flags = {
            NotificationType.APPOINTMENT_REMINDER: self.appointment_reminders,
            NotificationType.APPOINTMENT_CANCELLATION: self.appointment_reminders,
            NotificationType.PAYMENT_REMINDER: self.payment_notifications,
            NotificationType.PAYMENT_CONFIRMATION: self.payment_notifications,
            NotificationType.SYSTEM_ALERT: self.system_alerts,
            NotificationType.MAINTENANCE_NOTICE: self.system_alerts,
        }
        return category_flags.get(notification_type, True)

    def __repr__(self) -> str:
        return f"<NotificationPreference(user_id={self.user_id!r})>"
