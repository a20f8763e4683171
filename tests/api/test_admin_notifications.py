"""API tests for administrative notification endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from urovital.models.enums import UserRole, UserStatus

if TYPE_CHECKING:
    from httpx import AsyncClient

BASE = "/api/v1/admin/notifications"

CONTENT = {
    "type": "system_alert",
    "title": "Maintenance",
    "message": "The portal is down tonight",
    "priority": "high",
}


@pytest.mark.asyncio
async def test_admin_creates_notification(client: AsyncClient, auth_headers, patient_user, patient_headers) -> None:
    response = await client.post(
        BASE,
        json={**CONTENT, "owner_actor_id": patient_user.id, "data": {"window": "22:00-23:00"}},
        headers=auth_headers,
    )
    assert response.status_code == 201
    created = response.json()
    assert created["owner_actor_id"] == patient_user.id
    assert created["status"] == "sent"
    assert created["is_read"] is False
    assert created["priority"] == "high"
    assert created["data"] == {"window": "22:00-23:00"}

    inbox = await client.get("/api/v1/notifications", headers=patient_headers)
    assert [n["id"] for n in inbox.json()["notifications"]] == [created["id"]]


@pytest.mark.asyncio
async def test_create_for_missing_user(client: AsyncClient, auth_headers) -> None:
    response = await client.post(BASE, json={**CONTENT, "owner_actor_id": "ghost"}, headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_non_admin_cannot_create(client: AsyncClient, patient_user, patient_headers, doctor_headers) -> None:
    for headers in (patient_headers, doctor_headers):
        response = await client.post(
            BASE, json={**CONTENT, "owner_actor_id": patient_user.id}, headers=headers
        )
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ADMIN_REQUIRED"


@pytest.mark.asyncio
async def test_create_validates_body(client: AsyncClient, auth_headers, patient_user) -> None:
    response = await client.post(
        BASE,
        json={**CONTENT, "type": "telegram", "owner_actor_id": patient_user.id},
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_broadcast_to_role(client: AsyncClient, auth_headers, make_user, headers_for) -> None:
    doctors = [await make_user(UserRole.DOCTOR) for _ in range(2)]
    await make_user(UserRole.DOCTOR, status=UserStatus.INACTIVE)
    await make_user(UserRole.PATIENT, linked_resource_id="p5")

    response = await client.post(f"{BASE}/broadcast", json={**CONTENT, "role": "doctor"}, headers=auth_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["role"] == "doctor"
    assert data["created_count"] == 2
    assert len(data["notification_ids"]) == 2

    for doctor in doctors:
        inbox = await client.get("/api/v1/notifications", headers=headers_for(doctor.id))
        assert inbox.json()["total_count"] == 1

    admin_inbox = await client.get("/api/v1/notifications", headers=auth_headers)
    assert admin_inbox.json()["total_count"] == 0


@pytest.mark.asyncio
async def test_broadcast_skips_opted_out(client: AsyncClient, auth_headers, make_user, headers_for) -> None:
    opted_out = await make_user(UserRole.SECRETARY)
    await make_user(UserRole.SECRETARY)

    await client.put(
        "/api/v1/notifications/preferences",
        json={"system_alerts": False},
        headers=headers_for(opted_out.id),
    )

    response = await client.post(f"{BASE}/broadcast", json={**CONTENT, "role": "secretary"}, headers=auth_headers)
    assert response.json()["created_count"] == 1

    inbox = await client.get("/api/v1/notifications", headers=headers_for(opted_out.id))
    assert inbox.json()["total_count"] == 0


@pytest.mark.asyncio
async def test_broadcast_unknown_role(client: AsyncClient, auth_headers) -> None:
    response = await client.post(f"{BASE}/broadcast", json={**CONTENT, "role": "janitor"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "UNKNOWN_ROLE"


@pytest.mark.asyncio
async def test_broadcast_normalizes_role_spelling(client: AsyncClient, auth_headers, make_user) -> None:
    await make_user(UserRole.PATIENT, linked_resource_id="p7")

    for spelling in (" PATIENT ", "Paciente"):
        response = await client.post(f"{BASE}/broadcast", json={**CONTENT, "role": spelling}, headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["role"] == "patient"
        assert response.json()["created_count"] == 1
