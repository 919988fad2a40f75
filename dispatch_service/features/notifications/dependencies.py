"""FastAPI dependencies for the notifications feature.

Example usage:
    from dispatch_service.features.notifications.dependencies import (
        NotificationServiceDep,
    )

    @router.get("/notifications/stats")
    async def get_stats(service: NotificationServiceDep) -> NotificationStats:
        return await service.get_stats()
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from dispatch_service.features.notifications.service import NotificationService


def get_notification_service(request: Request) -> NotificationService:
    """Return the service instance owned by the running application.

    The instance is created by the application lifespan and stored on
    ``app.state.notification_service``.

    Raises:
        RuntimeError: If the application was started without a service.
    """
    service = getattr(request.app.state, "notification_service", None)
    if service is None:
        msg = "Notification service is not initialized; is the application lifespan running?"
        raise RuntimeError(msg)
    return service


NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]

__all__ = ["NotificationServiceDep", "get_notification_service"]
