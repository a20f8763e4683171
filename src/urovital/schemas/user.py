"""
User Schemas for RBAC.

Pydantic models for actor management requests and responses.

Role values arrive as free text so that legacy spellings (``paciente``,
``SECRETARIA`` ...) are accepted; endpoints normalise them with
``normalize_role`` and answer ``UNKNOWN_ROLE`` for anything else.
"""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.enums import UserRole, UserStatus


def _clean_link(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    return v or None


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class UserCreate(BaseModel):
    """Schema for registering a new actor."""

    email: str = Field(
        ...,
        min_length=3,
        max_length=255,
        description="Login email address",
        examples=["dra.perez@urovital.example"],
    )
    full_name: str | None = Field(
        None,
        max_length=200,
        description="Display name",
    )
    role: str = Field(
        default=UserRole.PATIENT.value,
        description="admin, doctor, secretary, promoter or patient",
        examples=["patient", "doctor"],
    )
    status: UserStatus = Field(
        default=UserStatus.INACTIVE,
        description="New accounts stay inactive until approved",
    )
    linked_resource_id: str | None = Field(
        None,
        max_length=64,
        description="Patient record this account represents",
    )

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Basic shape check; the address is stored lowercase."""
        v = v.strip().lower()
        local, sep, domain = v.partition("@")
        if not sep or not local or "." not in domain:
            raise ValueError("Invalid email address")
        return v

    @field_validator("linked_resource_id")
    @classmethod
    def validate_linked_resource_id(cls, v: str | None) -> str | None:
        """Treat blank links as no link."""
        return _clean_link(v)


class UserRoleUpdate(BaseModel):
    """Schema for updating only user's role."""

    role: str = Field(
        ...,
        min_length=1,
        description="New role",
        examples=["secretary"],
    )


class UserStatusUpdate(BaseModel):
    """Schema for activating/deactivating a user."""

    status: UserStatus = Field(
        ...,
        description="active or inactive",
    )


class UserLinkUpdate(BaseModel):
    """Schema for linking a user to a patient record. ``null`` clears the link."""

    linked_resource_id: str | None = Field(
        ...,
        max_length=64,
        description="Patient record id, or null to unlink",
    )

    @field_validator("linked_resource_id")
    @classmethod
    def validate_linked_resource_id(cls, v: str | None) -> str | None:
        return _clean_link(v)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="User ID")
    email: str = Field(..., description="Email address")
    full_name: str | None = Field(None, description="Display name")
    role: str = Field(..., description="User role")
    status: str = Field(..., description="active or inactive")
    linked_resource_id: str | None = Field(None, description="Linked patient record")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime | None = Field(None, description="Last update timestamp")
    last_seen_at: datetime | None = Field(None, description="Last authenticated request")


class UserListResponse(BaseModel):
    """Schema for paginated user list response."""

    success: bool = Field(default=True)
    users: list[UserResponse] = Field(..., description="List of users")
    total: int = Field(..., description="Total count")
    skip: int = Field(..., description="Offset")
    limit: int = Field(..., description="Page size")


class UserCreateResponse(BaseModel):
    """Schema for user creation response."""

    success: bool = Field(default=True)
    message: str = Field(default="User created successfully")
    user: UserResponse = Field(..., description="Created user")


class UserUpdateResponse(BaseModel):
    """Schema for user update response."""

    success: bool = Field(default=True)
    message: str = Field(default="User updated successfully")
    user: UserResponse = Field(..., description="Updated user")
