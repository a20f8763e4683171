"""Status gate for patient-role actors.

Applied on top of the access evaluator whenever a patient views clinical
data. The actor passed in must come from the current request's user lookup;
results are never cached because an administrator can deactivate or unlink
a patient between requests.
"""
from __future__ import annotations

from enum import Enum

from .access import Actor, can_access_own_resource
from .permissions import Capability


class ResourceView(str, Enum):
    """What the caller should render for a resource request."""

    GRANTED = "granted"
    DENIED = "denied"
    RESTRICTED = "restricted"


def is_restricted(actor: Actor) -> bool:
    """True for a patient whose account is inactive or lacks a linked record."""
    return actor.is_patient and (not actor.is_active or actor.linked_resource_id is None)


def resolve_resource_view(
    actor: Actor,
    resource_owner_id: str | None,
    capability: Capability | str,
) -> ResourceView:
    """Combine the gate and the evaluator into a single renderable decision.

    The gate wins: a restricted actor sees ``RESTRICTED`` regardless of what
    the capability or ownership checks would have returned.
    """
    if is_restricted(actor):
        return ResourceView.RESTRICTED
    if can_access_own_resource(actor, resource_owner_id, capability):
        return ResourceView.GRANTED
    return ResourceView.DENIED
