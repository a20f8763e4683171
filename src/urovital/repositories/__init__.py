"""Repositories package - Data access layer."""
from .notification_repository import NotificationQuery, NotificationRepository
from .user_repository import UserRepository

__all__ = [
    "NotificationQuery",
    "NotificationRepository",
    "UserRepository",
]
