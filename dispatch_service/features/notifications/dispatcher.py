"""Notification dispatcher: submission, manual retry and the asynchronous delivery path."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from dispatch_service.core.exceptions import InvalidStateException, NotFoundException
from dispatch_service.features.notifications.channels import (
    EmailTransport,
    InAppTransport,
    SmsTransport,
    TransportError,
    UnsupportedChannelError,
)
from dispatch_service.features.notifications.metrics import (
    notification_created_total,
    notification_delivered_total,
    notification_delivery_duration_seconds,
    notification_errors_total,
    notification_retry_total,
)
from dispatch_service.features.notifications.models import (
    Notification,
    NotificationStatus,
    NotificationType,
)
from dispatch_service.features.notifications.schemas import (
    NotificationCreate,
    parse_notification_create,
)
from dispatch_service.infra.logging import get_logger, set_log_context

if TYPE_CHECKING:
    from dispatch_service.features.notifications.channels import Transport
    from dispatch_service.features.notifications.repository import NotificationRepository


class NotificationDispatcher:
    """Creates notifications and drives their delivery attempts.

    Delivery is fire-and-forget: ``submit`` and ``retry`` return as soon as
    the record is pending and the attempt runs as a background task. Every
    outcome of an attempt (rejection, transport error, unexpected exception)
    ends in a status update, so a record never stays pending because of a
    failed attempt.
    """

    def __init__(
        self,
        repository: NotificationRepository,
        *,
        email: Transport | None = None,
        sms: Transport | None = None,
        in_app: Transport | None = None,
    ) -> None:
        self._repository = repository
        self._email = email or EmailTransport()
        self._sms = sms or SmsTransport()
        self._in_app = in_app or InAppTransport()
        self._tasks: set[asyncio.Task[NotificationStatus | None]] = set()
        self._logger = get_logger(__name__)

    @property
    def in_flight(self) -> int:
        """Number of delivery attempts currently running."""
        return len(self._tasks)

    def transport_for(self, notification_type: NotificationType) -> Transport:
        """Select the transport for a notification type.

        Raises:
            UnsupportedChannelError: If no transport handles the type.
        """
        match notification_type:
            case NotificationType.EMAIL:
                return self._email
            case NotificationType.SMS:
                return self._sms
            case NotificationType.IN_APP:
                return self._in_app
            case _:
                msg = f"Unsupported notification type: {notification_type}"
                raise UnsupportedChannelError(msg)

    async def submit(self, payload: NotificationCreate | Mapping[str, Any]) -> Notification:
        """Validate and store a notification, then start its delivery.

        Args:
            payload: Submit payload (camelCase mapping or validated model)

        Returns:
            The pending record, before the delivery attempt resolves

        Raises:
            ValidationException: If the payload is malformed; nothing is stored
        """
        data = parse_notification_create(payload)

        notification = await self._repository.create(
            user_id=data.user_id,
            type=data.type,
            title=data.title,
            message=data.message,
            status=NotificationStatus.PENDING,
            priority=data.priority,
            retry_count=0,
        )

        notification_created_total.labels(notification_type=notification.type).inc()
        self._logger.info(
            f"Created notification {notification.id} for user {notification.user_id} (type={notification.type})",
            extra={"notification_id": notification.id},
        )

        self.schedule_delivery(notification.id)
        return notification

    async def retry(self, notification_id: int) -> Notification:
        """Reset a failed notification to pending and attempt delivery again.

        The retry count is left alone; only the sweep increments it.

        Raises:
            NotFoundException: If the id is unknown
            InvalidStateException: If the notification is not failed
        """
        notification = await self._repository.get(notification_id)
        if notification is None:
            raise _not_found(notification_id)

        if not notification.is_retryable:
            raise InvalidStateException(
                detail="Only failed notifications can be retried",
                extra={"notification_id": notification_id, "status": str(notification.status)},
            )

        pending = await self._repository.update_status(notification_id, NotificationStatus.PENDING)
        if pending is None:
            raise _not_found(notification_id)

        notification_retry_total.labels(channel=pending.type, source="manual").inc()
        self._logger.info(
            f"Manual retry queued for notification {notification_id}",
            extra={"notification_id": notification_id, "retry_count": pending.retry_count},
        )

        self.schedule_delivery(notification_id)
        return pending

    def schedule_delivery(self, notification_id: int) -> asyncio.Task[NotificationStatus | None]:
        """Start a background delivery attempt without waiting for it.

        Must be called from a running event loop.
        """
        task = asyncio.create_task(
            self.deliver(notification_id),
            name=f"deliver-notification-{notification_id}",
        )
        # The loop only keeps weak references to tasks
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def deliver(self, notification_id: int) -> NotificationStatus | None:
        """Run one delivery attempt and record its outcome.

        Never raises (except on cancellation). Returns the recorded status,
        or None when the record could not be found or updated.
        """
        set_log_context(notification_id=notification_id)

        try:
            notification = await self._repository.get(notification_id)
            if notification is None:
                self._logger.warning(f"Notification {notification_id} vanished before delivery")
                return None
            delivered = await self._attempt(notification)
        except Exception as exc:
            self._logger.exception(f"Error processing notification {notification_id}: {exc}")
            delivered = False

        status = NotificationStatus.DELIVERED if delivered else NotificationStatus.FAILED
        try:
            updated = await self._repository.update_status(notification_id, status)
        except Exception as exc:
            self._logger.exception(
                f"Could not record status {status} for notification {notification_id}: {exc}",
            )
            return None

        if updated is None:
            self._logger.warning(f"Notification {notification_id} not found when recording {status}")
            return None

        self._logger.info(f"Notification {notification_id} {status}")
        return updated.status

    async def _attempt(self, notification: Notification) -> bool:
        channel = str(notification.type)
        set_log_context(channel=channel)
        logger = self._logger.bind(notification_id=notification.id, channel=channel)

        try:
            transport = self.transport_for(notification.type)
        except UnsupportedChannelError:
            notification_errors_total.labels(channel=channel, error_category="configuration").inc()
            logger.exception(f"No transport configured for notification {notification.id}")
            return False

        start_time = time.perf_counter()
        try:
            delivered = bool(
                await transport.attempt(
                    notification.user_id,
                    notification.title,
                    notification.message,
                ),
            )
        except TransportError as exc:
            delivered = False
            notification_errors_total.labels(channel=channel, error_category="transport").inc()
            logger.warning(f"Transport error for notification {notification.id}: {exc}")
        except Exception as exc:
            delivered = False
            notification_errors_total.labels(channel=channel, error_category="exception").inc()
            logger.exception(
                f"Exception delivering notification {notification.id} via {channel}: {exc}",
            )
        else:
            if not delivered:
                notification_errors_total.labels(channel=channel, error_category="rejected").inc()

        notification_delivery_duration_seconds.labels(channel=channel).observe(
            time.perf_counter() - start_time,
        )
        notification_delivered_total.labels(
            channel=channel,
            status="delivered" if delivered else "failed",
        ).inc()
        return delivered

    async def wait_idle(self) -> None:
        """Wait until every in-flight delivery attempt has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Abandon in-flight delivery attempts (their records stay pending)."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            self._logger.info(f"Abandoned {len(tasks)} in-flight delivery attempts")


def _not_found(notification_id: int) -> NotFoundException:
    return NotFoundException(
        detail=f"Notification {notification_id} not found",
        type="notification-not-found",
        extra={"notification_id": notification_id},
    )
