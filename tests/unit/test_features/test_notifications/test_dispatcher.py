"""Tests for the notification dispatcher."""

from __future__ import annotations

import asyncio
import logging

import pytest

from dispatch_service.core.exceptions import (
    InvalidStateException,
    NotFoundException,
    ValidationException,
)
from dispatch_service.features.notifications.channels import (
    TransportError,
    UnsupportedChannelError,
)
from dispatch_service.features.notifications.dispatcher import NotificationDispatcher
from dispatch_service.features.notifications.models import (
    NotificationStatus,
    NotificationType,
)
from dispatch_service.features.notifications.schemas import NotificationCreate
from tests.utils import valid_payload


@pytest.mark.asyncio
async def test_submit_returns_pending_before_delivery(dispatcher, repository):
    notification = await dispatcher.submit(valid_payload())

    assert notification.status == NotificationStatus.PENDING
    assert notification.retry_count == 0
    assert dispatcher.in_flight == 1

    await dispatcher.wait_idle()

    stored = await repository.get(notification.id)
    assert stored.status == NotificationStatus.DELIVERED
    assert stored.delivered_at is not None
    assert dispatcher.in_flight == 0


@pytest.mark.asyncio
async def test_submit_ids_strictly_increase(dispatcher):
    ids = [(await dispatcher.submit(valid_payload())).id for _ in range(5)]
    await dispatcher.wait_idle()

    assert ids == sorted(set(ids))


@pytest.mark.asyncio
async def test_submit_accepts_validated_model(dispatcher):
    payload = NotificationCreate(
        user_id="user-9",
        type=NotificationType.IN_APP,
        title="Hi",
        message="There",
        priority=True,
    )

    notification = await dispatcher.submit(payload)
    await dispatcher.wait_idle()

    assert notification.user_id == "user-9"
    assert notification.priority is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("overrides", "field", "message"),
    [
        ({"userId": ""}, "userId", "User ID is required"),
        ({"type": "push"}, "type", "Type must be email, sms, or in-app"),
        ({"title": ""}, "title", "Title is required"),
        ({"message": ""}, "message", "Message is required"),
    ],
)
async def test_submit_invalid_payload_creates_nothing(dispatcher, repository, overrides, field, message):
    with pytest.raises(ValidationException) as exc_info:
        await dispatcher.submit(valid_payload(**overrides))

    assert exc_info.value.errors[field] == message
    assert len(repository) == 0
    assert dispatcher.in_flight == 0


@pytest.mark.asyncio
async def test_submit_missing_fields_reports_each(dispatcher, repository):
    with pytest.raises(ValidationException) as exc_info:
        await dispatcher.submit({})

    assert set(exc_info.value.errors) == {"userId", "type", "title", "message"}
    assert len(repository) == 0


@pytest.mark.asyncio
async def test_email_transport_receives_user_title_message(dispatcher, email_transport):
    await dispatcher.submit(valid_payload(userId="u-1", title="T", message="M"))
    await dispatcher.wait_idle()

    assert email_transport.calls == [("u-1", "T", "M")]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("notification_type", "transport_fixture"),
    [("email", "email_transport"), ("sms", "sms_transport"), ("in-app", "in_app_transport")],
)
async def test_routes_to_channel_transport(request, dispatcher, notification_type, transport_fixture):
    await dispatcher.submit(valid_payload(type=notification_type))
    await dispatcher.wait_idle()

    assert len(request.getfixturevalue(transport_fixture).calls) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "outcome",
    [False, TransportError("connection reset"), RuntimeError("unexpected")],
)
async def test_failed_attempt_marks_failed(dispatcher, repository, email_transport, outcome):
    email_transport.outcomes = [outcome]

    notification = await dispatcher.submit(valid_payload())
    await dispatcher.wait_idle()

    stored = await repository.get(notification.id)
    assert stored.status == NotificationStatus.FAILED
    assert stored.delivered_at is None
    assert stored.retry_count == 0


@pytest.mark.asyncio
async def test_deliver_unknown_id_is_skipped(dispatcher):
    assert await dispatcher.deliver(12345) is None


@pytest.mark.asyncio
async def test_transport_for_unknown_type(dispatcher):
    with pytest.raises(UnsupportedChannelError):
        dispatcher.transport_for("carrier-pigeon")


@pytest.mark.asyncio
async def test_retry_unknown_id(dispatcher):
    with pytest.raises(NotFoundException):
        await dispatcher.retry(404)


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [NotificationStatus.PENDING, NotificationStatus.DELIVERED])
async def test_retry_rejects_non_failed(dispatcher, repository, status):
    created = await repository.create(
        user_id="user-1",
        type=NotificationType.EMAIL,
        title="t",
        message="m",
        status=status,
    )

    with pytest.raises(InvalidStateException) as exc_info:
        await dispatcher.retry(created.id)

    assert exc_info.value.detail == "Only failed notifications can be retried"
    assert (await repository.get(created.id)).status == status


@pytest.mark.asyncio
async def test_retry_failed_redelivers_without_counting(dispatcher, repository, email_transport):
    email_transport.outcomes = [False, True]
    notification = await dispatcher.submit(valid_payload())
    await dispatcher.wait_idle()
    assert (await repository.get(notification.id)).status == NotificationStatus.FAILED

    pending = await dispatcher.retry(notification.id)

    assert pending.status == NotificationStatus.PENDING
    assert pending.retry_count == 0

    await dispatcher.wait_idle()

    stored = await repository.get(notification.id)
    assert stored.status == NotificationStatus.DELIVERED
    assert stored.retry_count == 0
    assert len(email_transport.calls) == 2


@pytest.mark.asyncio
async def test_close_abandons_in_flight(repository):
    class SlowTransport:
        async def attempt(self, destination: str, subject: str, body: str) -> bool:
            await asyncio.sleep(60)
            return True

    dispatcher = NotificationDispatcher(repository, email=SlowTransport())
    notification = await dispatcher.submit(valid_payload())
    await asyncio.sleep(0)

    await dispatcher.close()

    assert dispatcher.in_flight == 0
    assert (await repository.get(notification.id)).status == NotificationStatus.PENDING


@pytest.mark.asyncio
@pytest.mark.parametrize("priority", ["yes", "true", "on", 1])
async def test_submit_rejects_non_boolean_priority(dispatcher, repository, priority):
    with pytest.raises(ValidationException) as exc_info:
        await dispatcher.submit(valid_payload(priority=priority))

    assert exc_info.value.errors["priority"] == "Priority must be a boolean"
    assert len(repository) == 0


@pytest.mark.asyncio
async def test_attempt_logs_carry_notification_and_channel(
    dispatcher, sms_transport, caplog: pytest.LogCaptureFixture,
):
    sms_transport.outcomes = [TransportError("gateway timeout")]

    with caplog.at_level(logging.WARNING, logger="dispatch_service.features.notifications.dispatcher"):
        notification = await dispatcher.submit(valid_payload(type="sms"))
        await dispatcher.wait_idle()

    record = next(r for r in caplog.records if "Transport error" in r.getMessage())
    assert record.notification_id == notification.id
    assert record.channel == "sms"
