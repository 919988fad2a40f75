"""Tests for the periodic retry sweep."""

from __future__ import annotations

import pytest

from dispatch_service.features.notifications.models import (
    NotificationStatus,
    NotificationType,
)
from dispatch_service.features.notifications.repository import InMemoryNotificationRepository
from dispatch_service.features.notifications.sweeper import SWEEP_JOB_ID, RetrySweeper


async def _failed(repository, retry_count: int = 0, type: NotificationType = NotificationType.EMAIL):
    return await repository.create(
        user_id="user-1",
        type=type,
        title="t",
        message="m",
        status=NotificationStatus.FAILED,
        retry_count=retry_count,
    )


@pytest.fixture
def sweeper(repository, dispatcher) -> RetrySweeper:
    return RetrySweeper(repository, dispatcher, interval_seconds=60, max_retries=3)


@pytest.mark.asyncio
async def test_sweep_requeues_below_cap_and_skips_at_cap(sweeper, repository, dispatcher):
    fresh = await _failed(repository, retry_count=0)
    almost = await _failed(repository, retry_count=2)
    capped = await _failed(repository, retry_count=3)

    result = await sweeper.sweep()

    assert sorted(result.requeued) == [fresh.id, almost.id]
    assert result.skipped == [capped.id]
    assert result.errors == []

    assert (await repository.get(fresh.id)).retry_count == 1
    assert (await repository.get(almost.id)).retry_count == 3
    capped_after = await repository.get(capped.id)
    assert capped_after.retry_count == 3
    assert capped_after.status == NotificationStatus.FAILED

    await dispatcher.wait_idle()

    assert (await repository.get(fresh.id)).status == NotificationStatus.DELIVERED
    assert (await repository.get(almost.id)).status == NotificationStatus.DELIVERED


@pytest.mark.asyncio
async def test_sweep_sets_pending_before_delivery(sweeper, repository, dispatcher):
    notification = await _failed(repository)

    await sweeper.sweep()

    assert (await repository.get(notification.id)).status == NotificationStatus.PENDING
    assert dispatcher.in_flight == 1


@pytest.mark.asyncio
async def test_notification_stops_after_max_retries(sweeper, repository, dispatcher, email_transport):
    email_transport.outcomes = [False]
    notification = await _failed(repository)

    for _ in range(5):
        await sweeper.sweep()
        await dispatcher.wait_idle()

    stored = await repository.get(notification.id)
    assert stored.retry_count == 3
    assert stored.status == NotificationStatus.FAILED
    assert len(email_transport.calls) == 3


@pytest.mark.asyncio
async def test_sweep_ignores_non_failed(sweeper, repository):
    await repository.create(user_id="u", type=NotificationType.SMS, title="t", message="m")

    result = await sweeper.sweep()

    assert (result.requeued, result.skipped, result.errors) == ([], [], [])


@pytest.mark.asyncio
async def test_error_on_one_notification_does_not_stop_batch(repository, dispatcher, clock):
    class FlakyRepository(InMemoryNotificationRepository):
        broken_id: int | None = None

        async def increment_retry(self, notification_id: int):
            if notification_id == self.broken_id:
                raise RuntimeError("storage hiccup")
            return await super().increment_retry(notification_id)

    flaky = FlakyRepository(clock=clock)
    broken = await _failed(flaky)
    healthy = await _failed(flaky)
    flaky.broken_id = broken.id
    sweeper = RetrySweeper(flaky, dispatcher, max_retries=3)

    result = await sweeper.sweep()

    assert result.errors == [broken.id]
    assert result.requeued == [healthy.id]
    assert (await flaky.get(healthy.id)).retry_count == 1
    assert (await flaky.get(broken.id)).status == NotificationStatus.FAILED


@pytest.mark.asyncio
async def test_list_failed_error_yields_empty_result(dispatcher, clock):
    class BrokenRepository(InMemoryNotificationRepository):
        async def list_failed(self):
            raise RuntimeError("unavailable")

    sweeper = RetrySweeper(BrokenRepository(clock=clock), dispatcher)

    result = await sweeper.sweep()

    assert (result.requeued, result.skipped, result.errors) == ([], [], [])


def test_rejects_non_positive_interval(repository):
    with pytest.raises(ValueError):
        RetrySweeper(repository, dispatcher=None, interval_seconds=0)


@pytest.mark.asyncio
async def test_start_schedules_interval_job(sweeper):
    sweeper.start()
    try:
        assert sweeper.running
        job = sweeper._scheduler.get_job(SWEEP_JOB_ID)
        assert job is not None
        assert job.trigger.interval.total_seconds() == 60

        sweeper.start()
        assert len(sweeper._scheduler.get_jobs()) == 1
    finally:
        sweeper.shutdown()

    assert not sweeper.running


@pytest.mark.asyncio
async def test_sweepers_are_independent(repository, dispatcher):
    first = RetrySweeper(repository, dispatcher, interval_seconds=30)
    second = RetrySweeper(repository, dispatcher, interval_seconds=45)

    first.start()
    second.start()
    try:
        assert first.running and second.running
    finally:
        first.shutdown()

    assert not first.running
    assert second.running
    second.shutdown()


def test_shutdown_without_start_is_noop(repository):
    sweeper = RetrySweeper(repository, dispatcher=None)
    sweeper.shutdown()
    assert not sweeper.running
