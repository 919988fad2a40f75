"""Pydantic schemas for the notifications feature.

Payloads on the wire use camelCase (``userId``, ``createdAt``); Python code
uses the snake_case attribute names.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError
from pydantic.alias_generators import to_camel

from dispatch_service.core.exceptions import ValidationException
from dispatch_service.features.notifications.models import (
    Notification,
    NotificationStatsSnapshot,
    NotificationStatus,
    NotificationType,
)

FIELD_MESSAGES: dict[str, str] = {
    "userId": "User ID is required",
    "type": "Type must be email, sms, or in-app",
    "title": "Title is required",
    "message": "Message is required",
    "priority": "Priority must be a boolean",
}


class CamelModel(BaseModel):
    """Base model serializing with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ============================================================================
# Request Schemas
# ============================================================================


class NotificationCreate(CamelModel):
    """Payload for submitting a notification."""

    user_id: str = Field(
        ...,
        min_length=1,
        description="Recipient identifier (not checked against a user registry)",
    )
    type: NotificationType = Field(
        ...,
        description="Delivery channel: email, sms, in-app",
    )
    title: str = Field(..., min_length=1, description="Notification title / subject")
    message: str = Field(..., min_length=1, description="Notification body")
    priority: StrictBool = Field(default=False, description="Advisory priority flag (JSON boolean only)")


def parse_notification_create(
    payload: NotificationCreate | Mapping[str, Any],
) -> NotificationCreate:
    """Validate a submit payload.

    Raises:
        ValidationException: With one message per offending field in
            ``extra["errors"]``.
    """
    if isinstance(payload, NotificationCreate):
        return payload
    try:
        return NotificationCreate.model_validate(payload)
    except ValidationError as exc:
        errors = field_errors(exc)
        raise ValidationException(
            detail="Invalid notification payload",
            extra={"errors": errors},
        ) from exc


def field_errors(exc: ValidationError) -> dict[str, str]:
    """Collapse pydantic errors into ``{field: message}`` (first error per field)."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ("payload",)
        field = str(loc[0])
        if field == "user_id":
            field = "userId"
        errors.setdefault(field, FIELD_MESSAGES.get(field, error.get("msg", "Invalid value")))
    return errors


# ============================================================================
# Response Schemas
# ============================================================================


class NotificationResponse(CamelModel):
    """Full notification record."""

    id: int
    user_id: str
    type: NotificationType
    title: str
    message: str
    status: NotificationStatus
    priority: bool
    retry_count: int
    created_at: datetime
    updated_at: datetime
    delivered_at: datetime | None = None

    @classmethod
    def from_record(cls, notification: Notification) -> NotificationResponse:
        return cls(
            id=notification.id,
            user_id=notification.user_id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            status=notification.status,
            priority=notification.priority,
            retry_count=notification.retry_count,
            created_at=notification.created_at,
            updated_at=notification.updated_at,
            delivered_at=notification.delivered_at,
        )


class NotificationCreatedResponse(CamelModel):
    """Echo returned by submit before delivery resolves."""

    id: int
    user_id: str
    type: NotificationType
    title: str
    status: NotificationStatus
    created_at: datetime

    @classmethod
    def from_record(cls, notification: Notification) -> NotificationCreatedResponse:
        return cls(
            id=notification.id,
            user_id=notification.user_id,
            type=notification.type,
            title=notification.title,
            status=notification.status,
            created_at=notification.created_at,
        )


class NotificationListResponse(CamelModel):
    """One page of a user's notifications."""

    notifications: list[NotificationResponse]
    total: int = Field(..., ge=0, description="Size of the filtered, unpaginated set")
    limit: int
    offset: int


class NotificationStats(CamelModel):
    """Delivery summary over every stored notification."""

    total: int = Field(..., ge=0)
    delivered: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    pending: int = Field(..., ge=0)
    delivery_rate: float = Field(
        ...,
        ge=0,
        le=100,
        description="Percentage of notifications delivered, rounded to 1 decimal",
    )

    @classmethod
    def from_snapshot(cls, snapshot: NotificationStatsSnapshot) -> NotificationStats:
        return cls(
            total=snapshot.total,
            delivered=snapshot.delivered,
            failed=snapshot.failed,
            pending=snapshot.pending,
            delivery_rate=snapshot.delivery_rate,
        )


class NotificationRetryResponse(CamelModel):
    """Acknowledgement that a retry was queued (the outcome is not awaited)."""

    id: int
    status: NotificationStatus
    message: str = "Notification retry initiated"
