"""Domain records for the notifications feature."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class NotificationType(StrEnum):
    """Delivery channel requested for a notification."""

    EMAIL = "email"
    SMS = "sms"
    IN_APP = "in-app"


class NotificationStatus(StrEnum):
    """Lifecycle state of a notification.

    Legal transitions: pending -> delivered, pending -> failed and
    failed -> pending (retry).
    """

    PENDING = "pending"
    DELIVERED = "delivered"
    FAILED = "failed"


@dataclass
class Notification:
    """A single delivery request tracked through its lifecycle.

    Attributes:
        id: Monotonic identifier assigned by the repository
        user_id: Opaque recipient identifier (also the transport destination)
        type: Requested channel
        title: Subject line
        message: Body text
        status: Current lifecycle state
        priority: Advisory flag, does not affect scheduling
        retry_count: Number of sweep retries performed so far
        created_at: Creation time, never changes
        updated_at: Refreshed on every mutation
        delivered_at: Set on each transition into delivered, never cleared
    """

    id: int
    user_id: str
    type: NotificationType
    title: str
    message: str
    status: NotificationStatus
    created_at: datetime
    updated_at: datetime
    priority: bool = False
    retry_count: int = 0
    delivered_at: datetime | None = None

    @property
    def is_retryable(self) -> bool:
        """Whether the manual retry path accepts this notification."""
        return self.status == NotificationStatus.FAILED


@dataclass(frozen=True)
class NotificationStatsSnapshot:
    """Counts per status plus the derived delivery rate (percent, 1 decimal)."""

    total: int
    delivered: int
    failed: int
    pending: int
    delivery_rate: float
