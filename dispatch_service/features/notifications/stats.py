"""Delivery-rate summary over the repository."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dispatch_service.features.notifications.schemas import NotificationStats

if TYPE_CHECKING:
    from dispatch_service.features.notifications.repository import NotificationRepository


class StatsAggregator:
    """Read-only view computing counts per status and the delivery rate.

    Holds no state; each call reflects the repository at call time.
    """

    def __init__(self, repository: NotificationRepository) -> None:
        self._repository = repository

    async def summary(self) -> NotificationStats:
        snapshot = await self._repository.stats()
        return NotificationStats.from_snapshot(snapshot)
