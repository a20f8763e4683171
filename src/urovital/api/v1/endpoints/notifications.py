"""
Notification Inbox API Endpoints.

Every route operates on the calling actor's own notifications. A
notification id belonging to someone else answers 404, exactly like an id
that does not exist.

Static paths (``/stats``, ``/preferences``, ``/read-all``) are declared
before ``/{notification_id}`` so they are not captured as ids.
"""
from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query

from ....core.config import get_settings
from ....core.rbac import CurrentActor
from ....db.session import DbSession
from ....models.enums import (
    NotificationChannel,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)
from ....schemas.notification import (
    MarkAllReadResponse,
    NotificationActionResponse,
    NotificationDeleteResponse,
    NotificationListResponse,
    NotificationPreferencesResponse,
    NotificationPreferencesUpdate,
    NotificationResponse,
    NotificationStatsResponse,
)
from ....services.notification_service import NotificationFilters, NotificationService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


async def get_notification_service(db: DbSession) -> NotificationService:
    return NotificationService(db)


# =============================================================================
# LIST / SUMMARY
# =============================================================================

@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List my notifications",
    description="Newest first. `unread_count` always covers the whole inbox.",
)
async def list_notifications(
    actor: CurrentActor,
    service: NotificationService = Depends(get_notification_service),
    unread_only: bool = Query(False, description="Only unread notifications"),
    type: NotificationType | None = Query(None, description="Filter by type"),
    channel: NotificationChannel | None = Query(None, description="Filter by channel"),
    status: NotificationStatus | None = Query(None, description="Filter by status"),
    priority: NotificationPriority | None = Query(None, description="Filter by priority"),
    limit: int | None = Query(None, description="Page size, 1 to 100"),
    offset: int = Query(0, description="Number of records to skip"),
) -> NotificationListResponse:
    filters = NotificationFilters(
        unread_only=unread_only,
        type=type,
        channel=channel,
        status=status,
        priority=priority,
        limit=limit if limit is not None else get_settings().NOTIFICATIONS_DEFAULT_PAGE_SIZE,
        offset=offset,
    )
    page = await service.list(actor.id, filters)

    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in page.items],
        total_count=page.total_count,
        unread_count=page.unread_count,
        has_more=page.has_more,
        next_cursor=page.next_cursor,
        limit=page.limit,
        offset=page.offset,
    )


@router.get(
    "/stats",
    response_model=NotificationStatsResponse,
    summary="Notification counts",
)
async def notification_stats(
    actor: CurrentActor,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationStatsResponse:
    stats = await service.stats(actor.id)
    return NotificationStatsResponse(
        total=stats.total,
        unread=stats.unread,
        today=stats.today,
        this_week=stats.this_week,
        by_type=stats.by_type,
        by_channel=stats.by_channel,
        by_status=stats.by_status,
    )


# =============================================================================
# PREFERENCES
# =============================================================================

@router.get(
    "/preferences",
    response_model=NotificationPreferencesResponse,
    summary="Get my notification preferences",
)
async def get_preferences(
    actor: CurrentActor,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationPreferencesResponse:
    preference = await service.get_preferences(actor.id)
    return NotificationPreferencesResponse.model_validate(preference)


@router.put(
    "/preferences",
    response_model=NotificationPreferencesResponse,
    summary="Update my notification preferences",
    description="Only the supplied fields change.",
)
async def update_preferences(
    payload: NotificationPreferencesUpdate,
    actor: CurrentActor,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationPreferencesResponse:
    changes = payload.model_dump(exclude_none=True)
    preference = await service.update_preferences(actor.id, changes)
    return NotificationPreferencesResponse.model_validate(preference)


# =============================================================================
# BULK MUTATIONS
# =============================================================================

@router.patch(
    "/read-all",
    response_model=MarkAllReadResponse,
    summary="Mark all my notifications as read",
)
async def mark_all_read(
    actor: CurrentActor,
    service: NotificationService = Depends(get_notification_service),
) -> MarkAllReadResponse:
    updated = await service.mark_all_read(actor.id)
    return MarkAllReadResponse(updated_count=updated)


# =============================================================================
# SINGLE NOTIFICATION
# =============================================================================

@router.get(
    "/{notification_id}",
    response_model=NotificationResponse,
    summary="Get one of my notifications",
)
async def get_notification(
    notification_id: str,
    actor: CurrentActor,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    notification = await service.get(notification_id, actor.id)
    return NotificationResponse.model_validate(notification)


@router.patch(
    "/{notification_id}/read",
    response_model=NotificationActionResponse,
    summary="Mark a notification as read",
    description="Idempotent: reading an already-read notification keeps its original read time.",
)
async def mark_notification_read(
    notification_id: str,
    actor: CurrentActor,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationActionResponse:
    notification = await service.mark_read(notification_id, actor.id)
    return NotificationActionResponse(
        message="Notification marked as read",
        notification=NotificationResponse.model_validate(notification),
    )


@router.delete(
    "/{notification_id}",
    response_model=NotificationDeleteResponse,
    summary="Delete a notification",
)
async def delete_notification(
    notification_id: str,
    actor: CurrentActor,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationDeleteResponse:
    deleted_id = await service.delete(notification_id, actor.id)
    return NotificationDeleteResponse(deleted_id=deleted_id)
