"""Access schemas.

Responses describing what the calling actor may do.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..core.status_gate import ResourceView


class ActorResponse(BaseModel):
    id: str
    role: str
    status: str
    linked_resource_id: str | None = None


class AccessProfileResponse(BaseModel):
    """The caller, their capabilities and whether the status gate applies."""

    actor: ActorResponse
    capabilities: list[str] = Field(..., description="Sorted capability tokens held by the role")
    is_admin: bool
    restricted: bool


class AccessCheckResponse(BaseModel):
    capability: str
    resource_owner_id: str | None = None
    allowed: bool
    restricted: bool


class ResourceAccessResponse(BaseModel):
    """Renderable decision for a patient-scoped resource."""

    patient_id: str
    capability: str
    view: ResourceView
    message: str | None = Field(default=None, description="Shown to restricted patients")
