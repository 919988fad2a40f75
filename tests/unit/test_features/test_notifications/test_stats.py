"""Tests for the stats aggregator."""

from __future__ import annotations

import pytest

from dispatch_service.features.notifications.models import (
    NotificationStatus,
    NotificationType,
)
from dispatch_service.features.notifications.stats import StatsAggregator


@pytest.mark.asyncio
async def test_empty_repository(repository):
    stats = await StatsAggregator(repository).summary()

    assert stats.total == 0
    assert stats.delivery_rate == 0.0
    assert stats.model_dump(by_alias=True) == {
        "total": 0,
        "delivered": 0,
        "failed": 0,
        "pending": 0,
        "deliveryRate": 0.0,
    }


@pytest.mark.asyncio
async def test_counts_and_rate(repository):
    statuses = [
        NotificationStatus.DELIVERED,
        NotificationStatus.DELIVERED,
        NotificationStatus.DELIVERED,
        NotificationStatus.FAILED,
        NotificationStatus.PENDING,
        NotificationStatus.PENDING,
    ]
    for status in statuses:
        await repository.create(
            user_id="u",
            type=NotificationType.IN_APP,
            title="t",
            message="m",
            status=status,
        )

    stats = await StatsAggregator(repository).summary()

    assert (stats.total, stats.delivered, stats.failed, stats.pending) == (6, 3, 1, 2)
    assert stats.delivered + stats.failed + stats.pending == stats.total
    assert stats.delivery_rate == 50.0
