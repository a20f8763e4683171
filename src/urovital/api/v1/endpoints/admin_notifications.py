"""
Admin Notification API Endpoints.

Issuing notifications is an administrative action. Owners can read, mark
and delete their own notifications but never create them.
"""
from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, status

from ....core.exceptions import UserNotFoundError
from ....core.permissions import normalize_role
from ....core.rbac import AdminActor
from ....db.session import DbSession
from ....repositories.user_repository import UserRepository
from ....schemas.notification import (
    BroadcastResponse,
    NotificationBroadcast,
    NotificationContent,
    NotificationCreate,
    NotificationResponse,
)
from ....services.notification_service import NotificationPayload, NotificationService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/admin/notifications", tags=["Admin - Notifications"])


async def get_notification_service(db: DbSession) -> NotificationService:
    return NotificationService(db)


def _payload(body: NotificationContent) -> NotificationPayload:
    return NotificationPayload(
        type=body.type,
        title=body.title,
        message=body.message,
        channel=body.channel,
        priority=body.priority,
        data=body.data,
        action_url=body.action_url,
        action_text=body.action_text,
    )


@router.post(
    "",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a notification to one user",
    description="Always delivered; the recipient's preferences are not consulted.",
)
async def create_notification(
    body: NotificationCreate,
    admin: AdminActor,
    db: DbSession,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    if await UserRepository(db).get_by_id(body.owner_actor_id) is None:
        raise UserNotFoundError(body.owner_actor_id)

    notification = await service.create(body.owner_actor_id, _payload(body))
    logger.info(
        "admin_created_notification",
        actor_id=admin.id,
        notification_id=notification.id,
        owner_actor_id=body.owner_actor_id,
    )
    return NotificationResponse.model_validate(notification)


@router.post(
    "/broadcast",
    response_model=BroadcastResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Notify every active user of a role",
    description="Recipients who opted out of the category or channel are skipped.",
)
async def broadcast_notification(
    body: NotificationBroadcast,
    admin: AdminActor,
    service: NotificationService = Depends(get_notification_service),
) -> BroadcastResponse:
    role = normalize_role(body.role)
    created = await service.broadcast_to_role(role, _payload(body))
    logger.info("admin_broadcast_notification", actor_id=admin.id, role=role.value)
    return BroadcastResponse(
        role=role.value,
        created_count=len(created),
        notification_ids=[n.id for n in created],
    )
