"""Repository for notification records.

``NotificationRepository`` is the contract the dispatcher, sweeper and stats
aggregator depend on. ``InMemoryNotificationRepository`` is the process-local
implementation; it is the only owner of the records and hands out copies.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol

from dispatch_service.features.notifications.models import (
    Notification,
    NotificationStatsSnapshot,
    NotificationStatus,
    NotificationType,
)
from dispatch_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

DEFAULT_LIMIT = 10

lazy_logger = get_lazy_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


def delivery_rate(delivered: int, total: int) -> float:
    """Percentage of delivered notifications rounded to one decimal, 0 when empty."""
    if total == 0:
        return 0.0
    return round(delivered / total * 100, 1)


class NotificationRepository(Protocol):
    """Storage contract for notification records.

    Lookups and updates of an unknown id return None; callers decide whether
    that is an error.
    """

    async def create(
        self,
        *,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        status: NotificationStatus = NotificationStatus.PENDING,
        priority: bool = False,
        retry_count: int = 0,
    ) -> Notification: ...

    async def get(self, notification_id: int) -> Notification | None: ...

    async def query(
        self,
        user_id: str,
        *,
        limit: int = DEFAULT_LIMIT,
        offset: int = 0,
        status: NotificationStatus | None = None,
        type: NotificationType | None = None,
    ) -> tuple[Sequence[Notification], int]: ...

    async def update_status(
        self,
        notification_id: int,
        status: NotificationStatus,
    ) -> Notification | None: ...

    async def increment_retry(self, notification_id: int) -> Notification | None: ...

    async def list_failed(self) -> Sequence[Notification]: ...

    async def stats(self) -> NotificationStatsSnapshot: ...


class InMemoryNotificationRepository:
    """Dictionary-backed repository guarded by a single lock.

    The lock serializes the id counter and every read-modify-write so that
    concurrent updates on the same id are never lost. Nothing awaits while
    the lock is held, so it is safe from asyncio tasks and worker threads alike.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._records: dict[int, Notification] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    async def create(
        self,
        *,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        status: NotificationStatus = NotificationStatus.PENDING,
        priority: bool = False,
        retry_count: int = 0,
    ) -> Notification:
        with self._lock:
            now = self._clock()
            notification = Notification(
                id=self._next_id,
                user_id=user_id,
                type=NotificationType(type),
                title=title,
                message=message,
                status=NotificationStatus(status),
                priority=priority,
                retry_count=retry_count,
                created_at=now,
                updated_at=now,
                delivered_at=now if status == NotificationStatus.DELIVERED else None,
            )
            self._records[notification.id] = notification
            self._next_id += 1

        lazy_logger.debug(lambda: f"repo.create(id={notification.id}, type={notification.type})")
        return replace(notification)

    async def get(self, notification_id: int) -> Notification | None:
        with self._lock:
            notification = self._records.get(notification_id)
            return replace(notification) if notification else None

    async def query(
        self,
        user_id: str,
        *,
        limit: int = DEFAULT_LIMIT,
        offset: int = 0,
        status: NotificationStatus | None = None,
        type: NotificationType | None = None,
    ) -> tuple[Sequence[Notification], int]:
        """Return one page of a user's notifications, newest first, and the filtered total."""
        with self._lock:
            matches = [
                n
                for n in self._records.values()
                if n.user_id == user_id
                and (status is None or n.status == status)
                and (type is None or n.type == type)
            ]
            matches.sort(key=lambda n: (n.created_at, n.id), reverse=True)
            page = [replace(n) for n in matches[offset : offset + limit]]

        lazy_logger.debug(
            lambda: f"repo.query({user_id=}, {limit=}, {offset=}, {status=}, {type=}) -> {len(page)}/{len(matches)}",
        )
        return page, len(matches)

    async def update_status(
        self,
        notification_id: int,
        status: NotificationStatus,
    ) -> Notification | None:
        """Set status and bump updated_at; a transition into delivered stamps delivered_at."""
        with self._lock:
            current = self._records.get(notification_id)
            if current is None:
                return None
            now = self._clock()
            updated = replace(
                current,
                status=NotificationStatus(status),
                updated_at=now,
                delivered_at=now if status == NotificationStatus.DELIVERED else current.delivered_at,
            )
            self._records[notification_id] = updated
            return replace(updated)

    async def increment_retry(self, notification_id: int) -> Notification | None:
        with self._lock:
            current = self._records.get(notification_id)
            if current is None:
                return None
            updated = replace(
                current,
                retry_count=current.retry_count + 1,
                updated_at=self._clock(),
            )
            self._records[notification_id] = updated
            return replace(updated)

    async def list_failed(self) -> Sequence[Notification]:
        with self._lock:
            return [
                replace(n)
                for n in self._records.values()
                if n.status == NotificationStatus.FAILED
            ]

    async def stats(self) -> NotificationStatsSnapshot:
        with self._lock:
            statuses = [n.status for n in self._records.values()]

        total = len(statuses)
        delivered = statuses.count(NotificationStatus.DELIVERED)
        return NotificationStatsSnapshot(
            total=total,
            delivered=delivered,
            failed=statuses.count(NotificationStatus.FAILED),
            pending=statuses.count(NotificationStatus.PENDING),
            delivery_rate=delivery_rate(delivered, total),
        )
