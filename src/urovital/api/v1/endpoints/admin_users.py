"""
Admin User Management API Endpoints.

Provides endpoints for managing actors in the RBAC system:
- List users with filtering
- Register users (inactive until approved)
- Change roles, status and patient-record links

Reads require ``users:read``; writes require ``users:write``. Users are
never hard-deleted; deactivation is a status change.
"""
from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query, status

from ....core.exceptions import BadRequestError, UserAlreadyExistsError, UserNotFoundError
from ....core.permissions import normalize_role
from ....core.rbac import UsersReader, UsersWriter
from ....db.session import DbSession
from ....models.enums import UserRole, UserStatus
from ....repositories.user_repository import UserRepository
from ....schemas.user import (
    UserCreate,
    UserCreateResponse,
    UserLinkUpdate,
    UserListResponse,
    UserResponse,
    UserRoleUpdate,
    UserStatusUpdate,
    UserUpdateResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/admin/users",
    tags=["Admin - User Management"],
)


# =============================================================================
# Dependencies
# =============================================================================

async def get_user_repo(db: DbSession) -> UserRepository:
    """Get user repository with database session."""
    return UserRepository(db)


async def _get_or_404(repo: UserRepository, user_id: str):
    user = await repo.get_by_id(user_id)
    if not user:
        raise UserNotFoundError(user_id)
    return user


# =============================================================================
# LIST ENDPOINTS
# =============================================================================

@router.get(
    "",
    response_model=UserListResponse,
    summary="List all users",
    description="Get paginated list of users with optional filtering by role and status.",
)
async def list_users(
    actor: UsersReader,
    repo: UserRepository = Depends(get_user_repo),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(50, ge=1, le=100, description="Number of records to return"),
    role: list[str] | None = Query(None, description="Filter by role"),
    user_status: UserStatus | None = Query(None, alias="status", description="Filter by status"),
) -> UserListResponse:
    """List all users with pagination and optional filtering."""
    roles = [normalize_role(r) for r in role] if role else None

    # Sequential: one AsyncSession cannot run two statements at once.
    users = await repo.get_all(skip=skip, limit=limit, role=roles, status=user_status)
    total = await repo.count_all(role=roles, status=user_status)

    return UserListResponse(
        success=True,
        users=[UserResponse.model_validate(u) for u in users],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get user by ID",
    description="Get details of a specific user.",
)
async def get_user(
    user_id: str,
    actor: UsersReader,
    repo: UserRepository = Depends(get_user_repo),
) -> UserResponse:
    user = await _get_or_404(repo, user_id)
    return UserResponse.model_validate(user)


# =============================================================================
# CREATE ENDPOINTS
# =============================================================================

@router.post(
    "",
    response_model=UserCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create a user with the given role. Accounts are inactive unless a status is supplied.",
)
async def create_user(
    payload: UserCreate,
    actor: UsersWriter,
    repo: UserRepository = Depends(get_user_repo),
) -> UserCreateResponse:
    """Create a new user. Requires ``users:write``."""
    role = normalize_role(payload.role)

    if await repo.get_by_email(payload.email):
        raise UserAlreadyExistsError(payload.email)

    user = await repo.create(
        email=payload.email,
        full_name=payload.full_name,
        role=role,
        status=payload.status,
        linked_resource_id=payload.linked_resource_id,
    )

    logger.info("admin_created_user", actor_id=actor.id, user_id=user.id, role=role.value)

    return UserCreateResponse(
        success=True,
        message=f"User created successfully with role '{role.value}'",
        user=UserResponse.model_validate(user),
    )


# =============================================================================
# UPDATE ENDPOINTS
# =============================================================================

@router.patch(
    "/{user_id}/role",
    response_model=UserUpdateResponse,
    summary="Update user role",
    description="Change a user's role.",
)
async def update_user_role(
    user_id: str,
    payload: UserRoleUpdate,
    actor: UsersWriter,
    repo: UserRepository = Depends(get_user_repo),
) -> UserUpdateResponse:
    new_role = normalize_role(payload.role)
    user = await _get_or_404(repo, user_id)

    if user_id == actor.id and new_role is not actor.role:
        raise BadRequestError(
            message="Cannot change your own role. Ask another administrator.",
            error_code="SELF_ROLE_CHANGE",
        )

    old_role = user.role
    user = await repo.update_role(user_id, new_role)

    logger.info(
        "admin_changed_user_role",
        actor_id=actor.id,
        user_id=user_id,
        old_role=old_role,
        new_role=new_role.value,
    )

    return UserUpdateResponse(
        success=True,
        message=f"User role changed from '{old_role}' to '{new_role.value}'",
        user=UserResponse.model_validate(user),
    )


@router.patch(
    "/{user_id}/status",
    response_model=UserUpdateResponse,
    summary="Activate/deactivate user",
    description="Activate or deactivate a user. Takes effect on the user's next request.",
)
async def update_user_status(
    user_id: str,
    payload: UserStatusUpdate,
    actor: UsersWriter,
    repo: UserRepository = Depends(get_user_repo),
) -> UserUpdateResponse:
    await _get_or_404(repo, user_id)

    if user_id == actor.id and payload.status is UserStatus.INACTIVE:
        raise BadRequestError(
            message="Cannot deactivate yourself. Ask another administrator.",
            error_code="SELF_DEACTIVATION",
        )

    user = await repo.set_status(user_id, payload.status)

    logger.info(
        "admin_changed_user_status",
        actor_id=actor.id,
        user_id=user_id,
        status=payload.status.value,
    )

    return UserUpdateResponse(
        success=True,
        message=f"User {payload.status.value} successfully",
        user=UserResponse.model_validate(user),
    )


@router.patch(
    "/{user_id}/link",
    response_model=UserUpdateResponse,
    summary="Link user to patient record",
    description="Set or clear the patient record a user represents.",
)
async def update_user_link(
    user_id: str,
    payload: UserLinkUpdate,
    actor: UsersWriter,
    repo: UserRepository = Depends(get_user_repo),
) -> UserUpdateResponse:
    user = await _get_or_404(repo, user_id)

    if payload.linked_resource_id is not None and user.role != UserRole.PATIENT.value:
        logger.info("linking_non_patient_user", actor_id=actor.id, user_id=user_id, role=user.role)

    user = await repo.link_resource(user_id, payload.linked_resource_id)

    logger.info(
        "admin_changed_user_link",
        actor_id=actor.id,
        user_id=user_id,
        linked=payload.linked_resource_id is not None,
    )

    message = "User linked successfully" if payload.linked_resource_id else "User unlinked successfully"
    return UserUpdateResponse(success=True, message=message, user=UserResponse.model_validate(user))
