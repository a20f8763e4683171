"""Tests for NotificationService against the in-memory database."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from urovital.core.exceptions import InvalidArgumentError, NotificationNotFoundError
from urovital.models.enums import (
    NotificationChannel,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
    UserRole,
    UserStatus,
)
from urovital.services.notification_service import (
    NotificationFilters,
    NotificationPage,
    NotificationPayload,
    NotificationService,
    get_recipient_cache,
)

REMINDER = NotificationPayload(
    type=NotificationType.APPOINTMENT_REMINDER,
    title="Appointment tomorrow",
    message="Your appointment is tomorrow at 10:00",
)
PAYMENT = NotificationPayload(
    type=NotificationType.PAYMENT_CONFIRMATION,
    title="Payment received",
    message="Thanks",
    channel=NotificationChannel.EMAIL,
    priority=NotificationPriority.LOW,
)


@pytest.fixture
def service(db_session: AsyncSession) -> NotificationService:
    return NotificationService(db_session)


@pytest.fixture
async def owner(make_user):
    return await make_user(UserRole.PATIENT, linked_resource_id="p1")


@pytest.fixture
async def other(make_user):
    return await make_user(UserRole.PATIENT, linked_resource_id="p2")


class TestCreate:
    async def test_created_sent_and_unread(self, service, owner):
        n = await service.create(owner.id, REMINDER)
        assert n.owner_actor_id == owner.id
        assert n.status == NotificationStatus.SENT.value
        assert n.is_read is False
        assert n.read_at is None
        assert n.sent_at is not None
        assert n.priority == "medium"
        assert n.channel == "in_app"

    async def test_notify_respects_preferences(self, service, owner):
        await service.update_preferences(owner.id, {"appointment_reminders": False})

        assert await service.notify(owner.id, REMINDER) is None
        assert await service.notify(owner.id, PAYMENT) is not None

    async def test_notify_respects_channel_flag(self, service, owner):
        await service.update_preferences(owner.id, {"email_enabled": False})
        assert await service.notify(owner.id, PAYMENT) is None

    async def test_notify_without_preferences_row_delivers(self, service, owner):
        assert await service.notify(owner.id, REMINDER) is not None

    async def test_create_ignores_preferences(self, service, owner):
        await service.update_preferences(owner.id, {"appointment_reminders": False})
        assert await service.create(owner.id, REMINDER) is not None


class TestBroadcast:
    async def test_reaches_only_active_role_members(self, service, make_user):
        active = await make_user(UserRole.DOCTOR)
        await make_user(UserRole.DOCTOR, status=UserStatus.INACTIVE)
        await make_user(UserRole.SECRETARY)

        created = await service.broadcast_to_role(UserRole.DOCTOR, REMINDER)
        assert [n.owner_actor_id for n in created] == [active.id]

    async def test_recipients_are_cached(self, service, make_user):
        await make_user(UserRole.DOCTOR)
        assert len(await service.broadcast_to_role(UserRole.DOCTOR, REMINDER)) == 1

        await make_user(UserRole.DOCTOR)
        assert len(await service.broadcast_to_role(UserRole.DOCTOR, REMINDER)) == 1

        get_recipient_cache(UserRole.DOCTOR).invalidate()
        assert len(await service.broadcast_to_role(UserRole.DOCTOR, REMINDER)) == 2

    async def test_skips_opted_out_recipients(self, service, make_user):
        first = await make_user(UserRole.DOCTOR)
        second = await make_user(UserRole.DOCTOR)
        await service.update_preferences(first.id, {"appointment_reminders": False})

        created = await service.broadcast_to_role(UserRole.DOCTOR, REMINDER)
        assert [n.owner_actor_id for n in created] == [second.id]


class TestQueries:
    async def test_get_hides_other_owners(self, service, owner, other):
        n = await service.create(owner.id, REMINDER)
        assert (await service.get(n.id, owner.id)).id == n.id

        with pytest.raises(NotificationNotFoundError) as missing:
            await service.get("nope", other.id)
        with pytest.raises(NotificationNotFoundError) as foreign:
            await service.get(n.id, other.id)
        assert missing.value.message == foreign.value.message
        assert missing.value.status_code == foreign.value.status_code == 404

    async def test_list_counts(self, service, owner, other):
        for _ in range(3):
            await service.create(owner.id, REMINDER)
        paid = await service.create(owner.id, PAYMENT)
        await service.mark_read(paid.id, owner.id)
        await service.create(other.id, REMINDER)

        page = await service.list(owner.id, NotificationFilters(limit=2))
        assert isinstance(page, NotificationPage)
        assert len(page.items) == 2
        assert page.total_count == 4
        assert page.unread_count == 3
        assert page.has_more is True
        assert page.next_cursor == "2"
        assert all(n.owner_actor_id == owner.id for n in page.items)

    async def test_list_filters_do_not_change_unread_count(self, service, owner):
        await service.create(owner.id, REMINDER)
        await service.create(owner.id, PAYMENT)

        page = await service.list(owner.id, NotificationFilters(type=NotificationType.PAYMENT_CONFIRMATION))
        assert page.total_count == 1
        assert page.unread_count == 2
        assert page.has_more is False
        assert page.next_cursor is None

    async def test_list_unread_only_and_channel(self, service, owner):
        a = await service.create(owner.id, REMINDER)
        await service.create(owner.id, PAYMENT)
        await service.mark_read(a.id, owner.id)

        unread = await service.list(owner.id, NotificationFilters(unread_only=True))
        assert [n.type for n in unread.items] == ["payment_confirmation"]

        email = await service.list(owner.id, NotificationFilters(channel=NotificationChannel.EMAIL))
        assert email.total_count == 1

    async def test_list_offset_past_end(self, service, owner):
        await service.create(owner.id, REMINDER)
        page = await service.list(owner.id, NotificationFilters(offset=10))
        assert list(page.items) == []
        assert page.total_count == 1
        assert page.has_more is False

    @pytest.mark.parametrize(
        "filters, argument",
        [
            (NotificationFilters(limit=101), "limit"),
            (NotificationFilters(limit=0), "limit"),
            (NotificationFilters(offset=-1), "offset"),
        ],
    )
    async def test_list_rejects_bad_paging(self, service, owner, filters, argument):
        with pytest.raises(InvalidArgumentError) as exc:
            await service.list(owner.id, filters)
        assert exc.value.details["argument"] == argument

    async def test_list_accepts_limit_at_maximum(self, service, owner):
        page = await service.list(owner.id, NotificationFilters(limit=100))
        assert page.limit == 100

    async def test_stats(self, service, owner):
        await service.create(owner.id, REMINDER)
        read = await service.create(owner.id, PAYMENT)
        await service.mark_read(read.id, owner.id)

        stats = await service.stats(owner.id)
        assert stats.total == 2
        assert stats.unread == 1
        assert stats.today == 2
        assert stats.this_week == 2
        assert stats.by_type == {"appointment_reminder": 1, "payment_confirmation": 1}
        assert stats.by_channel == {"in_app": 1, "email": 1}
        assert stats.by_status == {"sent": 1, "read": 1}

    async def test_stats_window_excludes_future_reference(self, service, owner):
        await service.create(owner.id, REMINDER)
        later = datetime.now(UTC) + timedelta(days=8)
        stats = await service.stats(owner.id, now=later)
        assert stats.total == 1
        assert stats.today == 0
        assert stats.this_week == 0


class TestMutations:
    async def test_mark_read_sets_state_once(self, service, owner):
        n = await service.create(owner.id, REMINDER)

        first = await service.mark_read(n.id, owner.id)
        assert first.is_read is True
        assert first.status == "read"
        read_at = first.read_at
        assert read_at is not None

        again = await service.mark_read(n.id, owner.id)
        assert again.is_read is True
        assert again.read_at == read_at

    async def test_mark_read_other_owner(self, service, owner, other):
        n = await service.create(owner.id, REMINDER)
        with pytest.raises(NotificationNotFoundError):
            await service.mark_read(n.id, other.id)
        assert (await service.get(n.id, owner.id)).is_read is False

    async def test_mark_all_read_counts_only_changed_rows(self, service, owner, other):
        a = await service.create(owner.id, REMINDER)
        await service.create(owner.id, REMINDER)
        await service.create(owner.id, PAYMENT)
        await service.create(other.id, REMINDER)
        await service.mark_read(a.id, owner.id)

        assert await service.mark_all_read(owner.id) == 2
        assert await service.mark_all_read(owner.id) == 0

        page = await service.list(owner.id, NotificationFilters())
        assert page.unread_count == 0
        assert all(n.status == "read" and n.read_at is not None for n in page.items)

        assert (await service.list(other.id, NotificationFilters())).unread_count == 1

    async def test_delete(self, service, owner, other):
        n = await service.create(owner.id, REMINDER)

        with pytest.raises(NotificationNotFoundError):
            await service.delete(n.id, other.id)

        assert await service.delete(n.id, owner.id) == n.id
        with pytest.raises(NotificationNotFoundError):
            await service.delete(n.id, owner.id)
        with pytest.raises(NotificationNotFoundError):
            await service.get(n.id, owner.id)


class TestPreferences:
    async def test_defaults_created_on_first_read(self, service, owner):
        prefs = await service.get_preferences(owner.id)
        assert prefs.email_enabled is True
        assert prefs.marketing_emails is False

    async def test_partial_update(self, service, owner):
        prefs = await service.update_preferences(owner.id, {"sms_enabled": False})
        assert prefs.sms_enabled is False
        assert prefs.push_enabled is True

    async def test_unknown_field_rejected(self, service, owner):
        with pytest.raises(InvalidArgumentError) as exc:
            await service.update_preferences(owner.id, {"carrier_pigeon": True})
        assert exc.value.details["fields"] == ["carrier_pigeon"]
