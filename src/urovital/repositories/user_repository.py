"""User Repository - Data access layer for RBAC users (actors)."""
from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.enums import UserRole, UserStatus
from ..models.user import User

log = structlog.get_logger(__name__)

_UNSET = object()


class UserRepository:
    """Repository for User CRUD operations.

    Role values are stored in canonical lowercase form; callers pass
    ``UserRole`` / ``UserStatus`` members.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize with database session."""
        self.session = session

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def get_by_id(self, user_id: str) -> User | None:
        """Get user by ID."""
        query = select(User).where(User.id == user_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email address."""
        query = select(User).where(User.email == email.strip().lower())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    def _filtered(self, query, role: UserRole | list[UserRole] | None, status: UserStatus | None):
        if role:
            if isinstance(role, list):
                query = query.where(User.role.in_([r.value for r in role]))
            else:
                query = query.where(User.role == role.value)
        if status is not None:
            query = query.where(User.status == status.value)
        return query

    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        role: UserRole | list[UserRole] | None = None,
        status: UserStatus | None = None,
    ) -> Sequence[User]:
        """Get all users with optional filtering."""
        query = self._filtered(select(User), role, status)
        query = query.order_by(User.created_at.desc()).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def count_all(
        self,
        role: UserRole | list[UserRole] | None = None,
        status: UserStatus | None = None,
    ) -> int:
        """Count total users matching the same filters as get_all."""
        query = self._filtered(select(func.count(User.id)), role, status)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def get_active_ids_by_role(self, role: UserRole) -> list[str]:
        """Ids of every active user holding ``role``."""
        query = (
            select(User.id)
            .where(User.role == role.value, User.status == UserStatus.ACTIVE.value)
            .order_by(User.created_at)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    # =========================================================================
    # CREATE OPERATIONS
    # =========================================================================

    async def create(
        self,
        email: str,
        full_name: str | None = None,
        role: UserRole = UserRole.PATIENT,
        status: UserStatus = UserStatus.INACTIVE,
        linked_resource_id: str | None = None,
    ) -> User:
        """Create a new user. Accounts start inactive unless told otherwise."""
        user = User(
            email=email.strip().lower(),
            full_name=full_name,
            role=role.value,
            status=status.value,
            linked_resource_id=linked_resource_id or None,
        )

        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)

        log.info("user_created", user_id=user.id, role=role.value, status=status.value)
        return user

    # =========================================================================
    # UPDATE OPERATIONS
    # =========================================================================

    async def update_fields(
        self,
        user_id: str,
        *,
        full_name: str | None = None,
        role: UserRole | None = None,
        status: UserStatus | None = None,
        linked_resource_id: str | None | object = _UNSET,
    ) -> User | None:
        """Apply one or more field updates to a user in a single transaction.

        ``linked_resource_id=None`` clears the link; omit it to leave the
        link untouched.

        Returns the refreshed User or None if not found.
        """
        user = await self.get_by_id(user_id)
        if not user:
            return None

        if full_name is not None:
            user.full_name = full_name
        if role is not None:
            old_role = user.role
            user.role = role.value
            log.info("user_role_staged", user_id=user_id, old_role=old_role, new_role=role.value)
        if status is not None:
            user.status = status.value
            log.info("user_status_staged", user_id=user_id, status=status.value)
        if linked_resource_id is not _UNSET:
            user.linked_resource_id = linked_resource_id or None  # type: ignore[assignment]
            log.info("user_link_staged", user_id=user_id, linked=user.linked_resource_id is not None)
        user.updated_at = datetime.now(UTC)

        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def update_role(self, user_id: str, role: UserRole) -> User | None:
        """Update user's role."""
        return await self.update_fields(user_id, role=role)

    async def set_status(self, user_id: str, status: UserStatus) -> User | None:
        """Activate or deactivate a user."""
        user = await self.update_fields(user_id, status=status)
        if user:
            action = "user_activated" if status is UserStatus.ACTIVE else "user_deactivated"
            log.info(action, user_id=user_id)
        return user

    async def activate(self, user_id: str) -> User | None:
        return await self.set_status(user_id, UserStatus.ACTIVE)

    async def deactivate(self, user_id: str) -> User | None:
        """Deactivate a user (soft state; users are never hard-deleted)."""
        return await self.set_status(user_id, UserStatus.INACTIVE)

    async def link_resource(self, user_id: str, linked_resource_id: str | None) -> User | None:
        """Link a user to a patient record, or clear the link with None."""
        return await self.update_fields(user_id, linked_resource_id=linked_resource_id)

    async def touch_last_seen(self, user_id: str) -> None:
        """Record an authenticated request without committing.

        The per-request session commits when the request completes.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(last_seen_at=datetime.now(UTC))
        )
        await self.session.execute(stmt)
