"""Services package - Business logic layer."""
from .notification_service import (
    NotificationFilters,
    NotificationPage,
    NotificationPayload,
    NotificationService,
    NotificationStats,
)

__all__ = [
    "NotificationFilters",
    "NotificationPage",
    "NotificationPayload",
    "NotificationService",
    "NotificationStats",
]
