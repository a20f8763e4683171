"""Notification schemas.

Request and response models for the per-user notification inbox and the
administrative notification endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..models.enums import (
    NotificationChannel,
    NotificationPriority,
    NotificationType,
)


class NotificationContent(BaseModel):
    """Fields shared by every way of issuing a notification."""

    type: NotificationType
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)
    channel: NotificationChannel = NotificationChannel.IN_APP
    priority: NotificationPriority = NotificationPriority.MEDIUM
    data: dict[str, Any] | None = Field(default=None, description="Free-form payload for clients")
    action_url: str | None = Field(default=None, max_length=500)
    action_text: str | None = Field(default=None, max_length=100)


class NotificationCreate(NotificationContent):
    """Payload for issuing a notification to one user."""

    owner_actor_id: str = Field(..., min_length=1, description="Recipient user id")


class NotificationBroadcast(NotificationContent):
    """Payload for notifying every active user of a role."""

    role: str = Field(..., min_length=1, description="Recipient role", examples=["doctor"])


class NotificationResponse(BaseModel):
    """API response model for a notification."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_actor_id: str
    type: str
    channel: str
    status: str
    priority: str
    title: str
    message: str
    is_read: bool
    data: dict[str, Any] | None = None
    action_url: str | None = None
    action_text: str | None = None
    sent_at: datetime | None = None
    read_at: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None


class NotificationListResponse(BaseModel):
    """One page of the caller's notifications."""

    success: bool = Field(default=True)
    notifications: list[NotificationResponse]
    total_count: int = Field(..., description="Rows matching the filters")
    unread_count: int = Field(..., description="All unread rows, ignoring filters")
    has_more: bool
    next_cursor: str | None = Field(default=None, description="Offset of the next page")
    limit: int
    offset: int


class NotificationActionResponse(BaseModel):
    success: bool = Field(default=True)
    message: str
    notification: NotificationResponse


class MarkAllReadResponse(BaseModel):
    success: bool = Field(default=True)
    updated_count: int


class NotificationDeleteResponse(BaseModel):
    success: bool = Field(default=True)
    deleted_id: str


class BroadcastResponse(BaseModel):
    success: bool = Field(default=True)
    role: str
    created_count: int
    notification_ids: list[str]


class NotificationStatsResponse(BaseModel):
    """Counts over all of the caller's notifications."""

    total: int
    unread: int
    today: int
    this_week: int
    by_type: dict[str, int]
    by_channel: dict[str, int]
    by_status: dict[str, int]


class NotificationPreferencesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    email_enabled: bool
    sms_enabled: bool
    push_enabled: bool
    appointment_reminders: bool
    payment_notifications: bool
    system_alerts: bool
    marketing_emails: bool
    updated_at: datetime | None = None


class NotificationPreferencesUpdate(BaseModel):
    """Partial preference update; omitted fields keep their value."""

    model_config = ConfigDict(extra="forbid")

    email_enabled: bool | None = None
    sms_enabled: bool | None = None
    push_enabled: bool | None = None
    appointment_reminders: bool | None = None
    payment_notifications: bool | None = None
    system_alerts: bool | None = None
    marketing_emails: bool | None = None
