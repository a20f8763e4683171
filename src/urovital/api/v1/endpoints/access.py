"""
Access API Endpoints.

Lets clients ask what the caller may do, so UI code can hide or show
actions without re-implementing the permission table.

``GET /patients/{patient_id}/access`` always answers 200: a denied or
restricted caller gets a renderable view state, not an error.
"""
from __future__ import annotations

import structlog
from fastapi import APIRouter, Query

from ....core.access import can, can_access_own_resource
from ....core.exceptions import InvalidArgumentError
from ....core.permissions import Capability, capabilities_for, parse_capability
from ....core.rbac import CurrentActor
from ....core.status_gate import ResourceView, is_restricted, resolve_resource_view
from ....schemas.access import (
    AccessCheckResponse,
    AccessProfileResponse,
    ActorResponse,
    ResourceAccessResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Access"])

RESTRICTED_MESSAGE = (
    "Your account is pending activation or is not yet linked to a patient "
    "record. Please contact the clinic."
)


def _require_capability_token(raw: str) -> Capability:
    capability = parse_capability(raw)
    if capability is None:
        raise InvalidArgumentError(
            message=f"Unknown capability: {raw!r}",
            argument="capability",
        )
    return capability


@router.get(
    "/access/me",
    response_model=AccessProfileResponse,
    summary="My role and capabilities",
)
async def access_profile(actor: CurrentActor) -> AccessProfileResponse:
    capabilities = (
        [c.value for c in Capability] if actor.is_admin else [c.value for c in capabilities_for(actor.role)]
    )
    return AccessProfileResponse(
        actor=ActorResponse(
            id=actor.id,
            role=actor.role.value,
            status=actor.status.value,
            linked_resource_id=actor.linked_resource_id,
        ),
        capabilities=sorted(capabilities),
        is_admin=actor.is_admin,
        restricted=is_restricted(actor),
    )


@router.get(
    "/access/check",
    response_model=AccessCheckResponse,
    summary="Check a single capability",
    description=(
        "Without `resource_owner_id` this checks the role table. With it, "
        "patients are checked against their linked record instead."
    ),
)
async def check_access(
    actor: CurrentActor,
    capability: str = Query(..., min_length=1, description="Capability token, e.g. `reports:read`"),
    resource_owner_id: str | None = Query(None, description="Patient record the resource belongs to"),
) -> AccessCheckResponse:
    parsed = _require_capability_token(capability)

    if resource_owner_id is None:
        allowed = can(actor, parsed)
    else:
        allowed = can_access_own_resource(actor, resource_owner_id, parsed)

    return AccessCheckResponse(
        capability=parsed.value,
        resource_owner_id=resource_owner_id,
        allowed=allowed,
        restricted=is_restricted(actor),
    )


@router.get(
    "/patients/{patient_id}/access",
    response_model=ResourceAccessResponse,
    summary="Resolve the view for a patient's clinical data",
)
async def patient_resource_access(
    patient_id: str,
    actor: CurrentActor,
    capability: str = Query(
        Capability.MEDICAL_HISTORY_READ.value,
        description="Capability the requested view needs",
    ),
) -> ResourceAccessResponse:
    parsed = _require_capability_token(capability)
    view = resolve_resource_view(actor, patient_id, parsed)

    if view is not ResourceView.GRANTED:
        logger.info(
            "patient_resource_view_blocked",
            actor_id=actor.id,
            patient_id=patient_id,
            capability=parsed.value,
            view=view.value,
        )

    return ResourceAccessResponse(
        patient_id=patient_id,
        capability=parsed.value,
        view=view,
        message=RESTRICTED_MESSAGE if view is ResourceView.RESTRICTED else None,
    )
