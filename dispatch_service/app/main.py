"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from dispatch_service.app.exception_handlers import configure_exception_handlers
from dispatch_service.app.lifespan import lifespan
from dispatch_service.app.router import setup_routers
from dispatch_service.core.settings import get_app_settings

if TYPE_CHECKING:
    from dispatch_service.core.settings.app import AppSettings
    from dispatch_service.features.notifications.service import NotificationService


def create_app(
    service: NotificationService | None = None,
    app_settings: AppSettings | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        service: Optional pre-built notification service. When omitted, the
            lifespan builds one from the environment settings.
        app_settings: Optional application settings override.

    Returns:
        Configured FastAPI application instance.
    """
    app_settings = app_settings or get_app_settings()

    app = FastAPI(
        title=app_settings.title,
        version=app_settings.version,
        debug=app_settings.debug,
        lifespan=lifespan,
    )

    if service is not None:
        app.state.notification_service = service

    # Configure exception handlers (must be before routers)
    configure_exception_handlers(app)

    setup_routers(app, app_settings)

    return app


# Application instance for uvicorn
app = create_app()
