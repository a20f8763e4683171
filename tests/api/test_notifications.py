"""API tests for the notification inbox endpoints."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from urovital.core.config import get_settings
from urovital.core.security import create_access_token
from urovital.models.enums import NotificationChannel, NotificationType, UserRole, UserStatus
from urovital.services.notification_service import NotificationPayload, NotificationService

if TYPE_CHECKING:
    from httpx import AsyncClient

BASE = "/api/v1/notifications"

REMINDER = NotificationPayload(
    type=NotificationType.APPOINTMENT_REMINDER,
    title="Reminder",
    message="See you tomorrow",
)
RECEIPT = NotificationPayload(
    type=NotificationType.PAYMENT_CONFIRMATION,
    title="Receipt",
    message="Payment received",
    channel=NotificationChannel.EMAIL,
)


@pytest.fixture
def seed(db_session):
    """Create notifications directly through the service."""
    service = NotificationService(db_session)

    async def _seed(owner_id: str, count: int = 1, payload: NotificationPayload = REMINDER) -> list[str]:
        return [(await service.create(owner_id, payload)).id for _ in range(count)]

    return _seed


# --- authentication ---

@pytest.mark.asyncio
async def test_requires_authentication(client: AsyncClient) -> None:
    response = await client.get(BASE)
    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "UNAUTHORIZED"
    assert body["meta"]["request_id"]


@pytest.mark.asyncio
async def test_expired_token_rejected(client: AsyncClient, patient_user) -> None:
    token = create_access_token(patient_user.id, settings=get_settings(), expires_delta=timedelta(seconds=-5))
    response = await client.get(BASE, headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_EXPIRED"


@pytest.mark.asyncio
async def test_token_for_deleted_user_rejected(client: AsyncClient, headers_for) -> None:
    response = await client.get(BASE, headers=headers_for("no-such-user"))
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_inactive_patient_can_still_read_inbox(client: AsyncClient, make_user, headers_for, seed) -> None:
    patient = await make_user(UserRole.PATIENT, status=UserStatus.INACTIVE)
    await seed(patient.id)
    response = await client.get(BASE, headers=headers_for(patient.id))
    assert response.status_code == 200
    assert response.json()["total_count"] == 1


# --- listing ---

@pytest.mark.asyncio
async def test_list_empty(client: AsyncClient, patient_headers) -> None:
    response = await client.get(BASE, headers=patient_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["notifications"] == []
    assert data["total_count"] == 0
    assert data["unread_count"] == 0
    assert data["has_more"] is False
    assert data["next_cursor"] is None
    assert data["limit"] == get_settings().NOTIFICATIONS_DEFAULT_PAGE_SIZE
    assert data["offset"] == 0


@pytest.mark.asyncio
async def test_list_pages_and_counts(client: AsyncClient, patient_user, patient_headers, doctor_user, seed) -> None:
    await seed(patient_user.id, 3)
    await seed(patient_user.id, 1, RECEIPT)
    await seed(doctor_user.id, 2)

    response = await client.get(BASE, params={"limit": 3}, headers=patient_headers)
    data = response.json()
    assert len(data["notifications"]) == 3
    assert data["total_count"] == 4
    assert data["unread_count"] == 4
    assert data["has_more"] is True
    assert data["next_cursor"] == "3"
    assert {n["owner_actor_id"] for n in data["notifications"]} == {patient_user.id}

    response = await client.get(BASE, params={"limit": 3, "offset": 3}, headers=patient_headers)
    data = response.json()
    assert len(data["notifications"]) == 1
    assert data["has_more"] is False


@pytest.mark.asyncio
async def test_list_filters(client: AsyncClient, patient_user, patient_headers, seed) -> None:
    await seed(patient_user.id, 2)
    await seed(patient_user.id, 1, RECEIPT)

    response = await client.get(BASE, params={"channel": "email"}, headers=patient_headers)
    data = response.json()
    assert data["total_count"] == 1
    assert data["notifications"][0]["type"] == "payment_confirmation"
    assert data["unread_count"] == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"limit": 101}, {"limit": 0}, {"offset": -1}])
async def test_list_rejects_bad_paging(client: AsyncClient, patient_headers, params) -> None:
    response = await client.get(BASE, params=params, headers=patient_headers)
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "INVALID_ARGUMENT"
    assert error["details"]["argument"] == next(iter(params))


@pytest.mark.asyncio
async def test_list_rejects_unknown_type(client: AsyncClient, patient_headers) -> None:
    response = await client.get(BASE, params={"type": "carrier_pigeon"}, headers=patient_headers)
    assert response.status_code == 422


# --- single notification ---

@pytest.mark.asyncio
async def test_get_own_and_foreign(client: AsyncClient, patient_user, patient_headers, doctor_headers, seed) -> None:
    (notification_id,) = await seed(patient_user.id)

    response = await client.get(f"{BASE}/{notification_id}", headers=patient_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "sent"

    foreign = await client.get(f"{BASE}/{notification_id}", headers=doctor_headers)
    missing = await client.get(f"{BASE}/does-not-exist", headers=doctor_headers)
    assert foreign.status_code == missing.status_code == 404
    assert foreign.json()["error"]["code"] == missing.json()["error"]["code"] == "NOTIFICATION_NOT_FOUND"
    assert foreign.json()["error"]["message"] == missing.json()["error"]["message"]


@pytest.mark.asyncio
async def test_mark_read_is_idempotent(client: AsyncClient, patient_user, patient_headers, seed) -> None:
    (notification_id,) = await seed(patient_user.id)

    first = await client.patch(f"{BASE}/{notification_id}/read", headers=patient_headers)
    assert first.status_code == 200
    first_body = first.json()["notification"]
    assert first_body["is_read"] is True
    assert first_body["status"] == "read"
    assert first_body["read_at"] is not None

    second = await client.patch(f"{BASE}/{notification_id}/read", headers=patient_headers)
    assert second.status_code == 200
    assert second.json()["notification"]["read_at"] == first_body["read_at"]


@pytest.mark.asyncio
async def test_mark_read_foreign_is_404(client: AsyncClient, patient_user, doctor_headers, seed) -> None:
    (notification_id,) = await seed(patient_user.id)
    response = await client.patch(f"{BASE}/{notification_id}/read", headers=doctor_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_mark_all_read(client: AsyncClient, patient_user, patient_headers, doctor_user, doctor_headers, seed) -> None:
    await seed(patient_user.id, 3)
    await seed(doctor_user.id, 1)

    response = await client.patch(f"{BASE}/read-all", headers=patient_headers)
    assert response.status_code == 200
    assert response.json()["updated_count"] == 3

    again = await client.patch(f"{BASE}/read-all", headers=patient_headers)
    assert again.json()["updated_count"] == 0

    listing = await client.get(BASE, headers=patient_headers)
    assert listing.json()["unread_count"] == 0

    doctor_listing = await client.get(BASE, headers=doctor_headers)
    assert doctor_listing.json()["unread_count"] == 1


@pytest.mark.asyncio
async def test_delete(client: AsyncClient, patient_user, patient_headers, doctor_headers, seed) -> None:
    (notification_id,) = await seed(patient_user.id)

    assert (await client.delete(f"{BASE}/{notification_id}", headers=doctor_headers)).status_code == 404

    response = await client.delete(f"{BASE}/{notification_id}", headers=patient_headers)
    assert response.status_code == 200
    assert response.json()["deleted_id"] == notification_id

    assert (await client.get(f"{BASE}/{notification_id}", headers=patient_headers)).status_code == 404
    assert (await client.delete(f"{BASE}/{notification_id}", headers=patient_headers)).status_code == 404


# --- stats and preferences ---

@pytest.mark.asyncio
async def test_stats(client: AsyncClient, patient_user, patient_headers, seed) -> None:
    await seed(patient_user.id, 2)
    await seed(patient_user.id, 1, RECEIPT)

    response = await client.get(f"{BASE}/stats", headers=patient_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["unread"] == 3
    assert data["by_channel"] == {"in_app": 2, "email": 1}


@pytest.mark.asyncio
async def test_preferences_roundtrip(client: AsyncClient, patient_headers) -> None:
    response = await client.get(f"{BASE}/preferences", headers=patient_headers)
    assert response.status_code == 200
    assert response.json()["marketing_emails"] is False

    response = await client.put(
        f"{BASE}/preferences",
        json={"marketing_emails": True, "sms_enabled": False},
        headers=patient_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["marketing_emails"] is True
    assert data["sms_enabled"] is False
    assert data["email_enabled"] is True


@pytest.mark.asyncio
async def test_preferences_reject_unknown_field(client: AsyncClient, patient_headers) -> None:
    response = await client.put(f"{BASE}/preferences", json={"fax_enabled": True}, headers=patient_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_api_responses_are_not_cacheable(client: AsyncClient, patient_headers) -> None:
    response = await client.get(BASE, headers=patient_headers)
    assert response.headers["Cache-Control"] == "no-store"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
