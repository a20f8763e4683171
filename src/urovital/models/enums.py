"""Shared Enums for the application.

Defines enum types used across models and schemas.
"""
from enum import Enum


class UserRole(str, Enum):
    """User role enum for authorization.

    Attributes:
        ADMIN: Full system access, satisfies every capability check
        DOCTOR: Clinical staff
        SECRETARY: Front-desk staff (appointments, billing, affiliations)
        PROMOTER: Affiliation sales staff
        PATIENT: Self-service access to the linked patient record only
    """
    ADMIN = "admin"
    DOCTOR = "doctor"
    SECRETARY = "secretary"
    PROMOTER = "promoter"
    PATIENT = "patient"

    @classmethod
    def default(cls) -> "UserRole":
        """Return the default role for new users."""
        return cls.PATIENT

    @property
    def is_staff(self) -> bool:
        return self is not UserRole.PATIENT


class UserStatus(str, Enum):
    """Account status. New accounts start inactive until approved."""
    ACTIVE = "active"
    INACTIVE = "inactive"

    @classmethod
    def default(cls) -> "UserStatus":
        return cls.INACTIVE


class NotificationType(str, Enum):
    APPOINTMENT_REMINDER = "appointment_reminder"
    APPOINTMENT_CANCELLATION = "appointment_cancellation"
    PAYMENT_REMINDER = "payment_reminder"
    PAYMENT_CONFIRMATION = "payment_confirmation"
    SYSTEM_ALERT = "system_alert"
    NEW_MESSAGE = "new_message"
    LAB_RESULT_READY = "lab_result_ready"
    PRESCRIPTION_READY = "prescription_ready"
    AFFILIATION_EXPIRING = "affiliation_expiring"
    MAINTENANCE_NOTICE = "maintenance_notice"


class NotificationChannel(str, Enum):
    IN_APP = "in_app"
    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"


class NotificationStatus(str, Enum):
    """Notification lifecycle status.

    Notifications are created SENT and move to READ. PENDING, DELIVERED and
    FAILED are reserved for delivery-confirmation semantics and are not
    produced by any current code path.
    """
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
    FAILED = "failed"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def default(cls) -> "NotificationPriority":
        return cls.MEDIUM
