"""Models package - SQLAlchemy ORM models."""
from .notification import Notification, NotificationPreference
from .user import User

__all__ = [
    "Notification",
    "NotificationPreference",
    "User",
]
