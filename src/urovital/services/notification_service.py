"""
Notification Service.

Owns the notification lifecycle for a single request:

    create  -> SENT (unread)
    mark_read / mark_all_read -> READ (read_at set once, never cleared)
    delete  -> row removed

Every operation that takes an ``actor_id`` is scoped to that owner. A
notification that exists but belongs to somebody else is reported exactly
like a missing one.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.cache import TTLCache
from ..core.config import get_settings
from ..core.exceptions import InvalidArgumentError, NotificationNotFoundError
from ..models.enums import (
    NotificationChannel,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
    UserRole,
)
from ..models.notification import Notification, NotificationPreference
from ..repositories.notification_repository import NotificationQuery, NotificationRepository
from ..repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)

MAX_PAGE_SIZE = 100

PREFERENCE_FIELDS = frozenset({
    "email_enabled",
    "sms_enabled",
    "push_enabled",
    "appointment_reminders",
    "payment_notifications",
    "system_alerts",
    "marketing_emails",
})


# =============================================================================
# Value objects
# =============================================================================

@dataclass(frozen=True, slots=True)
class NotificationPayload:
    """Content of a notification, independent of who receives it."""

    type: NotificationType
    title: str
    message: str
    channel: NotificationChannel = NotificationChannel.IN_APP
    priority: NotificationPriority = NotificationPriority.MEDIUM
    data: dict[str, Any] | None = None
    action_url: str | None = None
    action_text: str | None = None


@dataclass(frozen=True, slots=True)
class NotificationFilters:
    """List filters plus paging. Validated by :meth:`validate` before any query runs."""

    unread_only: bool = False
    type: NotificationType | None = None
    channel: NotificationChannel | None = None
    status: NotificationStatus | None = None
    priority: NotificationPriority | None = None
    limit: int = 20
    offset: int = 0

    def validate(self) -> None:
        """Raise InvalidArgumentError for out-of-range paging values."""
        if self.limit > MAX_PAGE_SIZE:
            raise InvalidArgumentError(
                message=f"limit must not exceed {MAX_PAGE_SIZE}",
                argument="limit",
                details={"max": MAX_PAGE_SIZE, "received": self.limit},
            )
        if self.limit < 1:
            raise InvalidArgumentError(
                message="limit must be at least 1",
                argument="limit",
                details={"received": self.limit},
            )
        if self.offset < 0:
            raise InvalidArgumentError(
                message="offset must not be negative",
                argument="offset",
                details={"received": self.offset},
            )

    def to_query(self) -> NotificationQuery:
        return NotificationQuery(
            unread_only=self.unread_only,
            type=self.type,
            channel=self.channel,
            status=self.status,
            priority=self.priority,
        )


@dataclass(slots=True)
class NotificationPage:
    items: Sequence[Notification]
    total_count: int
    unread_count: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total_count

    @property
    def next_cursor(self) -> str | None:
        return str(self.offset + self.limit) if self.has_more else None


@dataclass(slots=True)
class NotificationStats:
    total: int
    unread: int
    today: int
    this_week: int
    by_type: dict[str, int] = field(default_factory=dict)
    by_channel: dict[str, int] = field(default_factory=dict)
    by_status: dict[str, int] = field(default_factory=dict)


# =============================================================================
# Recipient cache
# =============================================================================

# Fan-out recipient ids per role. Only broadcast_to_role reads this.
_recipient_caches: dict[UserRole, TTLCache[list[str]]] = {}


def get_recipient_cache(role: UserRole) -> TTLCache[list[str]]:
    """Return the process-level recipient cache for ``role``."""
    cache = _recipient_caches.get(role)
    if cache is None:
        cache = TTLCache(
            get_settings().RECIPIENT_CACHE_TTL_SECONDS,
            name=f"recipients:{role.value}",
        )
        _recipient_caches[role] = cache
    return cache


def clear_recipient_caches() -> None:
    for cache in _recipient_caches.values():
        cache.invalidate()


# =============================================================================
# Service
# =============================================================================

class NotificationService:
    """Notification state machine bound to one database session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.repo = NotificationRepository(session)
        self.users = UserRepository(session)

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    async def create(self, owner_actor_id: str, payload: NotificationPayload) -> Notification:
        """Create a notification for ``owner_actor_id`` in the SENT state.

        Only administrative or system code calls this; owners never create
        their own notifications.
        """
        return await self.repo.create(
            owner_actor_id,
            type=payload.type,
            title=payload.title,
            message=payload.message,
            channel=payload.channel,
            priority=payload.priority,
            data=payload.data,
            action_url=payload.action_url,
            action_text=payload.action_text,
        )

    async def notify(self, owner_actor_id: str, payload: NotificationPayload) -> Notification | None:
        """Preference-aware create for event producers.

        Returns None when the owner opted out of this category or channel.
        """
        preference = await self.repo.get_preferences(owner_actor_id)
        if preference is not None and not preference.allows(payload.type, payload.channel):
            logger.info(
                "notification_suppressed_by_preference",
                owner_actor_id=owner_actor_id,
                type=payload.type.value,
                channel=payload.channel.value,
            )
            return None
        return await self.create(owner_actor_id, payload)

    async def broadcast_to_role(self, role: UserRole, payload: NotificationPayload) -> list[Notification]:
        """Notify every active user holding ``role``."""
        recipients = await get_recipient_cache(role).get_or_refresh(
            lambda: self.users.get_active_ids_by_role(role)
        )

        created: list[Notification] = []
        for recipient_id in recipients:
            notification = await self.notify(recipient_id, payload)
            if notification is not None:
                created.append(notification)

        logger.info(
            "notification_broadcast",
            role=role.value,
            recipients=len(recipients),
            created=len(created),
        )
        return created

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def get(self, notification_id: str, actor_id: str) -> Notification:
        notification = await self.repo.get_for_owner(notification_id, actor_id)
        if notification is None:
            raise NotificationNotFoundError(notification_id)
        return notification

    async def list(self, actor_id: str, filters: NotificationFilters) -> NotificationPage:
        """Return one page of the actor's notifications, newest first.

        ``unread_count`` covers all of the actor's notifications regardless
        of filters or paging; ``total_count`` counts the rows matching the
        filters.
        """
        filters.validate()
        query = filters.to_query()

        items = await self.repo.list_for_owner(
            actor_id, query, limit=filters.limit, offset=filters.offset
        )
        total_count = await self.repo.count_for_owner(actor_id, query)
        unread_count = await self.repo.count_unread(actor_id)

        return NotificationPage(
            items=items,
            total_count=total_count,
            unread_count=unread_count,
            limit=filters.limit,
            offset=filters.offset,
        )

    async def stats(self, actor_id: str, *, now: datetime | None = None) -> NotificationStats:
        now = now or datetime.now(UTC)
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        start_of_week = start_of_day - timedelta(days=start_of_day.weekday())

        return NotificationStats(
            total=await self.repo.count_for_owner(actor_id, NotificationQuery()),
            unread=await self.repo.count_unread(actor_id),
            today=await self.repo.count_created_since(actor_id, start_of_day),
            this_week=await self.repo.count_created_since(actor_id, start_of_week),
            by_type=await self.repo.count_grouped(actor_id, "type"),
            by_channel=await self.repo.count_grouped(actor_id, "channel"),
            by_status=await self.repo.count_grouped(actor_id, "status"),
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def mark_read(self, notification_id: str, actor_id: str) -> Notification:
        """Mark one notification read. Repeating the call is a successful no-op."""
        notification = await self.repo.mark_read(notification_id, actor_id)
        if notification is None:
            raise NotificationNotFoundError(notification_id)
        return notification

    async def mark_all_read(self, actor_id: str) -> int:
        """Mark every unread notification of the actor read and return how many changed."""
        return await self.repo.mark_all_read(actor_id)

    async def delete(self, notification_id: str, actor_id: str) -> str:
        """Permanently delete one of the actor's notifications and return its id."""
        if not await self.repo.delete_for_owner(notification_id, actor_id):
            raise NotificationNotFoundError(notification_id)
        return notification_id

    # -------------------------------------------------------------------------
    # Preferences
    # -------------------------------------------------------------------------

    async def get_preferences(self, actor_id: str) -> NotificationPreference:
        return await self.repo.get_or_create_preferences(actor_id)

    async def update_preferences(self, actor_id: str, changes: dict[str, bool]) -> NotificationPreference:
        unknown = set(changes) - PREFERENCE_FIELDS
        if unknown:
            raise InvalidArgumentError(
                message="Unknown preference fields",
                argument="preferences",
                details={"fields": sorted(unknown)},
            )
        return await self.repo.update_preferences(actor_id, changes)
