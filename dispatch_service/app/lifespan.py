"""Application lifespan management.

Startup:
1. Logging
2. Notification service (created unless one was injected on ``app.state``)
3. Retry sweeper

Shutdown runs in reverse: the sweeper stops, in-flight deliveries are
abandoned (their records stay pending).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from dispatch_service.core.settings import (
    get_app_settings,
    get_logging_settings,
    get_notification_settings,
)
from dispatch_service.features.notifications.service import NotificationService
from dispatch_service.infra.logging.config import setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    setup_logging(get_logging_settings())
    app_settings = get_app_settings()

    service: NotificationService | None = getattr(app.state, "notification_service", None)
    if service is None:
        service = NotificationService.from_settings(get_notification_settings())
        app.state.notification_service = service

    service.start()
    logger.info(
        "Application started",
        extra={
            "service": app_settings.service_name,
            "version": app_settings.version,
            "environment": app_settings.environment,
        },
    )

    try:
        yield
    finally:
        await service.shutdown()
        logger.info("Application shutdown complete")
