"""Notification Repository - Data access layer for per-user notifications.

Every query takes the owner id and filters on it, so a caller holding the
wrong id gets nothing back rather than another user's rows.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.enums import (
    NotificationChannel,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)
from ..models.notification import Notification, NotificationPreference

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class NotificationQuery:
    """Typed filter set accepted by :meth:`NotificationRepository.list_for_owner`."""

    unread_only: bool = False
    type: NotificationType | None = None
    channel: NotificationChannel | None = None
    status: NotificationStatus | None = None
    priority: NotificationPriority | None = None


class NotificationRepository:
    """Repository for Notification and NotificationPreference rows."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize with database session."""
        self.session = session

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def get_for_owner(self, notification_id: str, owner_actor_id: str) -> Notification | None:
        """Get a notification only if ``owner_actor_id`` owns it."""
        query = select(Notification).where(
            Notification.id == notification_id,
            Notification.owner_actor_id == owner_actor_id,
        )
        query = query.execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    def _apply_filters(self, query, owner_actor_id: str, filters: NotificationQuery):
        query = query.where(Notification.owner_actor_id == owner_actor_id)
        if filters.unread_only:
            query = query.where(Notification.is_read.is_(False))
        if filters.type is not None:
            query = query.where(Notification.type == filters.type.value)
        if filters.channel is not None:
            query = query.where(Notification.channel == filters.channel.value)
        if filters.status is not None:
            query = query.where(Notification.status == filters.status.value)
        if filters.priority is not None:
            query = query.where(Notification.priority == filters.priority.value)
        return query

    async def list_for_owner(
        self,
        owner_actor_id: str,
        filters: NotificationQuery,
        *,
        limit: int,
        offset: int,
    ) -> Sequence[Notification]:
        """Newest first page of the owner's notifications matching ``filters``."""
        query = self._apply_filters(select(Notification), owner_actor_id, filters)
        query = query.order_by(Notification.created_at.desc()).offset(offset).limit(limit)
        query = query.execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def count_for_owner(self, owner_actor_id: str, filters: NotificationQuery) -> int:
        query = self._apply_filters(select(func.count(Notification.id)), owner_actor_id, filters)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def count_unread(self, owner_actor_id: str) -> int:
        """Unread total for the owner, independent of any list filter."""
        return await self.count_for_owner(owner_actor_id, NotificationQuery(unread_only=True))

    async def count_grouped(self, owner_actor_id: str, column_name: str) -> dict[str, int]:
        """Owner's notification counts grouped by ``type``, ``channel`` or ``status``."""
        column = {
            "type": Notification.type,
            "channel": Notification.channel,
            "status": Notification.status,
        }[column_name]
        query = (
            select(column, func.count(Notification.id))
            .where(Notification.owner_actor_id == owner_actor_id)
            .group_by(column)
        )
        result = await self.session.execute(query)
        return {key: count for key, count in result.all()}

    async def count_created_since(self, owner_actor_id: str, since: datetime) -> int:
        query = select(func.count(Notification.id)).where(
            Notification.owner_actor_id == owner_actor_id,
            Notification.created_at >= since,
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    # =========================================================================
    # CREATE OPERATIONS
    # =========================================================================

    async def create(
        self,
        owner_actor_id: str,
        *,
        type: NotificationType,
        title: str,
        message: str,
        channel: NotificationChannel = NotificationChannel.IN_APP,
        priority: NotificationPriority = NotificationPriority.MEDIUM,
        data: dict[str, Any] | None = None,
        action_url: str | None = None,
        action_text: str | None = None,
    ) -> Notification:
        """Insert a notification in the ``sent`` state, unread."""
        now = datetime.now(UTC)
        notification = Notification(
            owner_actor_id=owner_actor_id,
            type=type.value,
            channel=channel.value,
            status=NotificationStatus.SENT.value,
            title=title,
            message=message,
            priority=priority.value,
            is_read=False,
            data=data,
            action_url=action_url,
            action_text=action_text,
            sent_at=now,
            read_at=None,
            created_at=now,
        )

        self.session.add(notification)
        await self.session.commit()
        await self.session.refresh(notification)

        log.info(
            "notification_created",
            notification_id=notification.id,
            owner_actor_id=owner_actor_id,
            type=type.value,
            channel=channel.value,
        )
        return notification

    # =========================================================================
    # UPDATE OPERATIONS
    # =========================================================================

    async def mark_read(self, notification_id: str, owner_actor_id: str) -> Notification | None:
        """Move an unread notification to ``read`` and return the stored row.

        The UPDATE only matches unread rows, so an already-read notification
        keeps its first ``read_at``. Returns None when the owner holds no such
        notification.
        """
        stmt = (
            update(Notification)
            .where(
                Notification.id == notification_id,
                Notification.owner_actor_id == owner_actor_id,
                Notification.is_read.is_(False),
            )
            .values(
                is_read=True,
                status=NotificationStatus.READ.value,
                read_at=datetime.now(UTC),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()

        if result.rowcount:
            log.info("notification_marked_read", notification_id=notification_id, owner_actor_id=owner_actor_id)
        return await self.get_for_owner(notification_id, owner_actor_id)

    async def mark_all_read(self, owner_actor_id: str) -> int:
        """Mark every unread notification of the owner as read.

        A single conditional UPDATE; the returned count is the number of
        rows that statement changed.
        """
        stmt = (
            update(Notification)
            .where(
                Notification.owner_actor_id == owner_actor_id,
                Notification.is_read.is_(False),
            )
            .values(
                is_read=True,
                status=NotificationStatus.READ.value,
                read_at=datetime.now(UTC),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()

        updated = result.rowcount or 0
        log.info("notifications_marked_read", owner_actor_id=owner_actor_id, updated_count=updated)
        return updated

    # =========================================================================
    # DELETE OPERATIONS
    # =========================================================================

    async def delete_for_owner(self, notification_id: str, owner_actor_id: str) -> bool:
        """Hard delete a notification the owner holds. Returns False when nothing matched."""
        stmt = (
            delete(Notification)
            .where(
                Notification.id == notification_id,
                Notification.owner_actor_id == owner_actor_id,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()

        deleted = (result.rowcount or 0) > 0
        if deleted:
            log.info("notification_deleted", notification_id=notification_id, owner_actor_id=owner_actor_id)
        return deleted

    # =========================================================================
    # PREFERENCES
    # =========================================================================

    async def get_preferences(self, user_id: str) -> NotificationPreference | None:
        query = select(NotificationPreference).where(NotificationPreference.user_id == user_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_or_create_preferences(self, user_id: str) -> NotificationPreference:
        """Return the user's preferences, inserting the defaults on first access."""
        existing = await self.get_preferences(user_id)
        if existing:
            return existing

        preference = NotificationPreference(
            user_id=user_id,
            email_enabled=True,
            sms_enabled=True,
            push_enabled=True,
            appointment_reminders=True,
            payment_notifications=True,
            system_alerts=True,
            marketing_emails=False,
        )
        self.session.add(preference)
        await self.session.commit()
        await self.session.refresh(preference)

        log.info("notification_preferences_created", user_id=user_id)
        return preference

    async def update_preferences(self, user_id: str, changes: dict[str, bool]) -> NotificationPreference:
        preference = await self.get_or_create_preferences(user_id)
        for field, value in changes.items():
            setattr(preference, field, value)
        preference.updated_at = datetime.now(UTC)

        await self.session.commit()
        await self.session.refresh(preference)

        log.info("notification_preferences_updated", user_id=user_id, fields=sorted(changes))
        return preference
