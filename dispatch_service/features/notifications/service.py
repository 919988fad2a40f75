"""Notification service: the boundary operations of the dispatch engine.

``NotificationService`` is constructed explicitly and owns its repository,
dispatcher, retry sweeper and stats aggregator. Nothing is kept in module
globals, so several instances can live side by side (one per app, one per
test).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from dispatch_service.core.exceptions import NotFoundException, ValidationException
from dispatch_service.core.settings import NotificationSettings, get_notification_settings
from dispatch_service.features.notifications.channels import (
    EmailTransport,
    InAppTransport,
    SmsTransport,
)
from dispatch_service.features.notifications.dispatcher import NotificationDispatcher
from dispatch_service.features.notifications.repository import InMemoryNotificationRepository
from dispatch_service.features.notifications.schemas import (
    NotificationCreate,
    NotificationCreatedResponse,
    NotificationListResponse,
    NotificationResponse,
    NotificationRetryResponse,
    NotificationStats,
)
from dispatch_service.features.notifications.stats import StatsAggregator
from dispatch_service.features.notifications.sweeper import RetrySweeper
from dispatch_service.infra.logging import get_logger

if TYPE_CHECKING:
    from dispatch_service.features.notifications.channels import Transport
    from dispatch_service.features.notifications.models import (
        NotificationStatus,
        NotificationType,
    )
    from dispatch_service.features.notifications.repository import NotificationRepository


class NotificationService:
    """Service for submitting, listing and retrying notifications.

    Provides:
    - submit: validate, store as pending, deliver in the background
    - get / get_by_user: record lookup and paginated listing
    - get_stats: delivery-rate summary
    - retry: manual re-delivery of a failed notification
    - start / shutdown: lifecycle of the periodic retry sweep
    """

    def __init__(
        self,
        repository: NotificationRepository | None = None,
        *,
        settings: NotificationSettings | None = None,
        email: Transport | None = None,
        sms: Transport | None = None,
        in_app: Transport | None = None,
    ) -> None:
        """Wire the engine components.

        Args:
            repository: Optional repository (defaults to a fresh in-memory one)
            settings: Optional settings (defaults to the cached environment settings)
            email: Optional email transport (defaults to the simulated one)
            sms: Optional SMS transport (defaults to the simulated one)
            in_app: Optional in-app transport
        """
        self.settings = settings or get_notification_settings()
        self.repository: NotificationRepository = (
            repository if repository is not None else InMemoryNotificationRepository()
        )
        self.dispatcher = NotificationDispatcher(
            self.repository,
            email=email
            or EmailTransport(
                latency=self.settings.email_latency_seconds,
                success_rate=self.settings.email_success_rate,
            ),
            sms=sms
            or SmsTransport(
                latency=self.settings.sms_latency_seconds,
                success_rate=self.settings.sms_success_rate,
            ),
            in_app=in_app or InAppTransport(),
        )
        self.sweeper = RetrySweeper(
            self.repository,
            self.dispatcher,
            interval_seconds=self.settings.retry_interval_seconds,
            max_retries=self.settings.max_retries,
        )
        self.stats = StatsAggregator(self.repository)
        self._logger = get_logger(__name__)

    @classmethod
    def from_settings(cls, settings: NotificationSettings | None = None) -> NotificationService:
        """Build a service with the default in-memory repository and simulated transports."""
        return cls(InMemoryNotificationRepository(), settings=settings or get_notification_settings())

    async def submit(
        self,
        payload: NotificationCreate | Mapping[str, Any],
    ) -> NotificationCreatedResponse:
        """Submit a notification; delivery is not awaited.

        Raises:
            ValidationException: With per-field messages; nothing is stored
        """
        notification = await self.dispatcher.submit(payload)
        return NotificationCreatedResponse.from_record(notification)

    async def get(self, notification_id: int) -> NotificationResponse:
        """Return one notification.

        Raises:
            NotFoundException: If the id is unknown
        """
        notification = await self.repository.get(notification_id)
        if notification is None:
            raise NotFoundException(
                detail=f"Notification {notification_id} not found",
                type="notification-not-found",
                extra={"notification_id": notification_id},
            )
        return NotificationResponse.from_record(notification)

    async def get_by_user(
        self,
        user_id: str,
        *,
        limit: int | None = None,
        offset: int = 0,
        status: NotificationStatus | None = None,
        type: NotificationType | None = None,
    ) -> NotificationListResponse:
        """List a user's notifications, newest first.

        Args:
            user_id: Recipient identifier
            limit: Page size (defaults to the configured page size)
            offset: Number of matching records to skip
            status: Optional status filter
            type: Optional channel filter

        Returns:
            The page plus the total size of the filtered set (empty when nothing matches)

        Raises:
            ValidationException: If limit or offset is out of range
        """
        if limit is None:
            limit = self.settings.default_page_limit
        errors: dict[str, str] = {}
        if not 1 <= limit <= self.settings.max_page_limit:
            errors["limit"] = f"Limit must be between 1 and {self.settings.max_page_limit}"
        if offset < 0:
            errors["offset"] = "Offset must not be negative"
        if errors:
            raise ValidationException(detail="Invalid pagination parameters", extra={"errors": errors})

        notifications, total = await self.repository.query(
            user_id,
            limit=limit,
            offset=offset,
            status=status,
            type=type,
        )
        return NotificationListResponse(
            notifications=[NotificationResponse.from_record(n) for n in notifications],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def get_stats(self) -> NotificationStats:
        return await self.stats.summary()

    async def retry(self, notification_id: int) -> NotificationRetryResponse:
        """Queue a manual retry of a failed notification.

        Raises:
            NotFoundException: If the id is unknown
            InvalidStateException: If the notification is not failed
        """
        notification = await self.dispatcher.retry(notification_id)
        return NotificationRetryResponse(id=notification.id, status=notification.status)

    def start(self) -> None:
        """Start the periodic retry sweep (if enabled). Needs a running loop."""
        if self.settings.sweeper_enabled:
            self.sweeper.start()
        else:
            self._logger.info("Retry sweeper disabled by configuration")

    async def wait_idle(self) -> None:
        """Wait for every in-flight delivery attempt to finish."""
        await self.dispatcher.wait_idle()

    async def shutdown(self) -> None:
        """Stop the sweep and abandon in-flight deliveries."""
        self.sweeper.shutdown()
        await self.dispatcher.close()
