"""API v1 endpoints package."""

from . import (
    access,
    admin_notifications,
    admin_users,
    health,
    notifications,
)

__all__ = [
    "access",
    "admin_notifications",
    "admin_users",
    "health",
    "notifications",
]
