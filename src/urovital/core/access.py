"""Access evaluator.

Pure, synchronous authorization decisions over an :class:`Actor`.

Two paths grant access:

- role path: the actor's role holds the capability (admins hold every
  capability through ``admin:all``);
- ownership path: a patient-role actor is the subject of the resource, is
  active, and has a linked patient record.

Every function here returns a bool and never raises. Callers decide how to
render a denial.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from ..models.enums import UserRole, UserStatus
from .permissions import Capability, capabilities_for, normalize_role, parse_capability

if TYPE_CHECKING:
    from ..models.user import User

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Actor:
    """The authenticated principal behind a request.

    Built from a freshly loaded ``User`` on every request; role and status
    are canonical enums from the moment of construction.
    """

    id: str
    role: UserRole
    status: UserStatus
    linked_resource_id: str | None = None

    @classmethod
    def build(
        cls,
        id: str,
        role: UserRole | str,
        status: UserStatus | str = UserStatus.ACTIVE,
        linked_resource_id: str | None = None,
    ) -> "Actor":
        """Construct an actor, normalising loosely-typed role/status values.

        Raises:
            UnknownRoleError: ``role`` is not a recognised role spelling.
            ValueError: ``status`` is not a recognised status.
        """
        if not isinstance(status, UserStatus):
            status = UserStatus(str(status).strip().lower())
        return cls(
            id=id,
            role=normalize_role(role),
            status=status,
            linked_resource_id=linked_resource_id or None,
        )

    @classmethod
    def from_user(cls, user: "User") -> "Actor":
        return cls.build(
            id=user.id,
            role=user.role,
            status=user.status,
            linked_resource_id=user.linked_resource_id,
        )

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    @property
    def is_patient(self) -> bool:
        return self.role is UserRole.PATIENT

    @property
    def is_active(self) -> bool:
        return self.status is UserStatus.ACTIVE


def can(actor: Actor, capability: Capability | str) -> bool:
    """Return True if the actor's role grants ``capability``.

    Tokens outside the capability set are denied for every role, admins
    included. Admins pass every known capability.
    """
    parsed = parse_capability(capability)
    if parsed is None:
        logger.warning("unknown_capability_checked", actor_id=actor.id, capability=str(capability))
        return False

    if actor.is_admin:
        return True
    return parsed in capabilities_for(actor.role)


def owns_resource(actor: Actor, resource_owner_id: str | None) -> bool:
    """Ownership path: active patient whose linked record is the resource owner.

    A missing link and an inactive account each block this path on their own.
    """
    if not actor.is_patient:
        return False
    if actor.linked_resource_id is None or resource_owner_id is None:
        return False
    if not actor.is_active:
        return False
    return actor.linked_resource_id == resource_owner_id


def can_access_own_resource(
    actor: Actor,
    resource_owner_id: str | None,
    capability: Capability | str,
) -> bool:
    """Decide access to a resource whose subject is ``resource_owner_id``.

    Staff roles are authorized by capability alone. Patients are authorized
    only through the ownership path; their table capabilities never let them
    reach another patient's resources.
    """
    if actor.is_patient:
        return owns_resource(actor, resource_owner_id)
    return can(actor, capability)
