"""API router for the notifications feature.

Endpoints:
- POST /notifications - Submit a notification (delivery happens in the background)
- GET /users/{user_id}/notifications - List a user's notifications, newest first
- GET /notifications/stats - Delivery statistics
- GET /notifications/{notification_id} - Get a single notification
- POST /notifications/{notification_id}/retry - Manually retry a failed notification
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Path, Query, status

from dispatch_service.core.schemas import ProblemDetails
from dispatch_service.features.notifications.dependencies import NotificationServiceDep
from dispatch_service.features.notifications.models import (
    NotificationStatus,
    NotificationType,
)
from dispatch_service.features.notifications.schemas import (
    NotificationCreatedResponse,
    NotificationListResponse,
    NotificationResponse,
    NotificationRetryResponse,
    NotificationStats,
)
from dispatch_service.infra.logging import get_lazy_logger

lazy_logger = get_lazy_logger(__name__)

router = APIRouter(tags=["notifications"])

NotificationIdPath = Annotated[int, Path(description="Notification identifier")]


@router.post(
    "/notifications",
    response_model=NotificationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a notification",
    description="""
Store a notification as pending and start its delivery in the background.

The response is returned before the delivery attempt resolves, so `status`
is always `pending`. Poll the notification (or the user's listing) to see
the outcome.
""",
    responses={422: {"model": ProblemDetails, "description": "Invalid payload"}},
)
async def create_notification(
    service: NotificationServiceDep,
    payload: Annotated[
        dict[str, Any],
        Body(
            examples=[
                {
                    "userId": "user-123",
                    "type": "email",
                    "title": "Welcome",
                    "message": "Thanks for signing up",
                    "priority": False,
                },
            ],
        ),
    ],
) -> NotificationCreatedResponse:
    """Submit a notification for delivery."""
    return await service.submit(payload)


@router.get(
    "/users/{user_id}/notifications",
    response_model=NotificationListResponse,
    summary="List a user's notifications",
    description="""
List notifications for a user, newest first.

**Query Parameters:**
- `limit`: Maximum results (1-100, default: 10)
- `offset`: Pagination offset (default: 0)
- `status`: Filter by status (pending, delivered, failed)
- `type`: Filter by channel (email, sms, in-app)

An unknown user simply has no notifications.
""",
)
async def list_user_notifications(
    service: NotificationServiceDep,
    user_id: Annotated[str, Path(min_length=1, description="Recipient identifier")],
    limit: Annotated[int | None, Query(ge=1, le=100, description="Maximum results")] = None,
    offset: Annotated[int, Query(ge=0, description="Pagination offset")] = 0,
    notification_status: Annotated[
        NotificationStatus | None,
        Query(alias="status", description="Filter by status"),
    ] = None,
    notification_type: Annotated[
        NotificationType | None,
        Query(alias="type", description="Filter by channel"),
    ] = None,
) -> NotificationListResponse:
    """List notifications for a user."""
    lazy_logger.debug(
        lambda: f"list_user_notifications: {user_id=}, {limit=}, {offset=}, "
        f"status={notification_status}, type={notification_type}",
    )
    return await service.get_by_user(
        user_id,
        limit=limit,
        offset=offset,
        status=notification_status,
        type=notification_type,
    )


@router.get(
    "/notifications/stats",
    response_model=NotificationStats,
    summary="Get delivery statistics",
    description="Counts per status over every stored notification plus the delivery rate (percent).",
)
async def get_notification_stats(service: NotificationServiceDep) -> NotificationStats:
    """Get delivery statistics."""
    return await service.get_stats()


@router.get(
    "/notifications/{notification_id}",
    response_model=NotificationResponse,
    summary="Get a notification",
    responses={404: {"model": ProblemDetails, "description": "Notification not found"}},
)
async def get_notification(
    service: NotificationServiceDep,
    notification_id: NotificationIdPath,
) -> NotificationResponse:
    """Get a single notification by id."""
    return await service.get(notification_id)


@router.post(
    "/notifications/{notification_id}/retry",
    response_model=NotificationRetryResponse,
    summary="Retry a failed notification",
    description="""
Reset a failed notification to pending and attempt delivery again.

The outcome is not awaited. Manual retries do not count against the
automatic retry limit.
""",
    responses={
        404: {"model": ProblemDetails, "description": "Notification not found"},
        409: {"model": ProblemDetails, "description": "Notification is not failed"},
    },
)
async def retry_notification(
    service: NotificationServiceDep,
    notification_id: NotificationIdPath,
) -> NotificationRetryResponse:
    """Manually retry a failed notification."""
    return await service.retry(notification_id)
