"""Periodic retry sweep for failed notifications.

APScheduler triggers ``RetrySweeper.sweep`` on a fixed interval (no jitter,
no backoff). Each tick re-queues every failed notification below the retry
cap; notifications at the cap stay failed for good.

Architecture:
    AsyncIOScheduler (in-process) -> sweep() -> dispatcher.schedule_delivery()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import (
    AsyncIOScheduler,  # type: ignore[import-untyped]
)
from apscheduler.triggers.interval import (
    IntervalTrigger,  # type: ignore[import-untyped]
)

from dispatch_service.features.notifications.metrics import (
    notification_retry_exhausted_total,
    notification_retry_total,
)
from dispatch_service.features.notifications.models import NotificationStatus
from dispatch_service.infra.logging import get_logger

if TYPE_CHECKING:
    from dispatch_service.features.notifications.dispatcher import NotificationDispatcher
    from dispatch_service.features.notifications.models import Notification
    from dispatch_service.features.notifications.repository import NotificationRepository

DEFAULT_INTERVAL_SECONDS = 60.0
DEFAULT_MAX_RETRIES = 3
SWEEP_JOB_ID = "notification-retry-sweep"


@dataclass
class SweepResult:
    """Ids handled by one sweep tick."""

    requeued: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    errors: list[int] = field(default_factory=list)


class RetrySweeper:
    """Re-queues failed notifications until they reach ``max_retries``.

    A sweep does not wait for the deliveries it starts. It also does not
    coordinate with manual retries of the same id; whichever attempt records
    its status last wins.
    """

    def __init__(
        self,
        repository: NotificationRepository,
        dispatcher: NotificationDispatcher,
        *,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        if interval_seconds <= 0:
            msg = f"interval_seconds must be positive, got {interval_seconds}"
            raise ValueError(msg)
        self._repository = repository
        self._dispatcher = dispatcher
        self.interval_seconds = interval_seconds
        self.max_retries = max_retries
        self._scheduler: AsyncIOScheduler | None = None
        self._logger = get_logger(__name__)

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def sweep(self) -> SweepResult:
        """Run one sweep tick.

        Each notification is handled independently; an error on one is
        logged and the rest of the batch continues.
        """
        result = SweepResult()

        try:
            failed = await self._repository.list_failed()
        except Exception:
            self._logger.exception("Retry sweep could not list failed notifications")
            return result

        for notification in failed:
            if notification.retry_count >= self.max_retries:
                result.skipped.append(notification.id)
                notification_retry_exhausted_total.labels(channel=notification.type).inc()
                continue

            try:
                if await self._requeue(notification):
                    result.requeued.append(notification.id)
            except Exception:
                result.errors.append(notification.id)
                self._logger.exception(
                    f"Error processing retry for notification {notification.id}",
                    extra={"notification_id": notification.id},
                )

        if failed:
            self._logger.info(
                "Retry sweep finished",
                extra={
                    "failed_count": len(failed),
                    "requeued": len(result.requeued),
                    "skipped": len(result.skipped),
                    "errors": len(result.errors),
                },
            )
        return result

    async def _requeue(self, notification: Notification) -> bool:
        updated = await self._repository.increment_retry(notification.id)
        if updated is None:
            return False

        pending = await self._repository.update_status(notification.id, NotificationStatus.PENDING)
        if pending is None:
            return False

        notification_retry_total.labels(channel=pending.type, source="sweep").inc()
        self._logger.debug(
            f"Retry {pending.retry_count}/{self.max_retries} queued for notification {pending.id}",
        )
        self._dispatcher.schedule_delivery(pending.id)
        return True

    def start(self) -> None:
        """Schedule the sweep on this instance's own scheduler.

        Must be called from a running event loop. Calling it twice is a no-op.
        """
        if self.running:
            return

        scheduler = AsyncIOScheduler(
            timezone="UTC",
            job_defaults={
                "coalesce": True,  # Combine multiple pending executions into one
                "max_instances": 1,  # Only one sweep at a time
                "misfire_grace_time": max(1, int(self.interval_seconds)),
            },
        )
        scheduler.add_job(
            self.sweep,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=SWEEP_JOB_ID,
            name="Retry failed notifications",
            replace_existing=True,
        )
        scheduler.start()
        self._scheduler = scheduler

        self._logger.info(
            "Retry sweeper started",
            extra={"interval_seconds": self.interval_seconds, "max_retries": self.max_retries},
        )

    def shutdown(self) -> None:
        """Stop the timer. Deliveries already started are not affected."""
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        self._logger.info("Retry sweeper stopped")
