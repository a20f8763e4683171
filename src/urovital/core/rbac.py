"""RBAC (Role-Based Access Control) FastAPI dependencies.

Usage:
    @router.get("/admin/endpoint")
    async def admin_endpoint(admin: AdminActor):
        ...

    @router.get("/users")
    async def list_users(
        actor: Annotated[Actor, Depends(require_capability(Capability.USERS_READ))],
    ):
        ...

The actor's role and status are loaded from the database on every request.
Token claims other than ``sub`` are never trusted for authorization.
"""
from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Annotated

import structlog
from fastapi import Depends, Request

from ..db.session import DbSession
from ..repositories.user_repository import UserRepository
from .access import Actor, can
from .config import Settings, get_settings
from .exceptions import ForbiddenError, UnauthorizedError
from .permissions import Capability
from .security import _decode_jwt, extract_bearer_token

logger = structlog.get_logger(__name__)


async def get_current_actor(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    db: DbSession,
) -> Actor:
    """Decode the bearer token and return the caller as an Actor.

    Inactive patients are admitted so that patient-scoped views can answer
    with the restricted state. Any other inactive account is rejected here.

    Raises:
        UnauthorizedError: Missing/invalid/expired token, or user not found.
        ForbiddenError: Non-patient account is inactive.
    """
    token = extract_bearer_token(request)
    payload = _decode_jwt(token, settings=settings)

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise UnauthorizedError(message="Invalid token subject", error_code="INVALID_TOKEN")

    repo = UserRepository(db)
    user = await repo.get_by_id(user_id)
    if not user:
        logger.warning("token_subject_not_found", user_id=user_id)
        raise UnauthorizedError(
            message="User not found. Please contact administrator.",
            error_code="USER_NOT_FOUND",
        )

    actor = Actor.from_user(user)
    if not actor.is_active and not actor.is_patient:
        logger.warning("inactive_user_access_attempt", user_id=user.id, role=actor.role.value)
        raise ForbiddenError(
            message="Your account has been deactivated. Please contact administrator.",
            error_code="USER_INACTIVE",
        )

    await repo.touch_last_seen(user.id)
    await db.commit()
    return actor


CurrentActor = Annotated[Actor, Depends(get_current_actor)]


async def require_admin(actor: CurrentActor) -> Actor:
    """Require Admin role. Raises ForbiddenError otherwise."""
    if not actor.is_admin:
        logger.warning("admin_access_denied", user_id=actor.id, role=actor.role.value)
        raise ForbiddenError(message="Admin access required", error_code="ADMIN_REQUIRED")
    return actor


def require_capability(capability: Capability) -> Callable[[Actor], Awaitable[Actor]]:
    """Build a dependency that admits only actors holding ``capability``."""

    async def dependency(actor: CurrentActor) -> Actor:
        if not can(actor, capability):
            logger.warning(
                "capability_denied",
                user_id=actor.id,
                role=actor.role.value,
                capability=capability.value,
            )
            raise ForbiddenError(
                message="Insufficient permissions",
                error_code="INSUFFICIENT_PERMISSIONS",
                details={"capability": capability.value},
            )
        return actor

    return dependency


# ---------------------------------------------------------------------------
# Convenient type aliases for endpoint signatures
# ---------------------------------------------------------------------------
AdminActor = Annotated[Actor, Depends(require_admin)]
UsersReader = Annotated[Actor, Depends(require_capability(Capability.USERS_READ))]
UsersWriter = Annotated[Actor, Depends(require_capability(Capability.USERS_WRITE))]
