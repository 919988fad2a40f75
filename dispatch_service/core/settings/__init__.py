"""Modular Pydantic Settings v2 configuration.

Settings are split by domain (app/logging/notifications), read from
environment variables (and an optional ``.env`` file) and cached by loaders:

    from dispatch_service.core.settings import get_notification_settings

    settings = get_notification_settings()
    print(settings.retry_interval_seconds)
"""

from __future__ import annotations

from .app import AppSettings
from .loader import (
    clear_settings_cache,
    get_app_settings,
    get_logging_settings,
    get_notification_settings,
)
from .logs import LoggingSettings
from .notifications import NotificationSettings

__all__ = [
    "AppSettings",
    "LoggingSettings",
    "NotificationSettings",
    "clear_settings_cache",
    "get_app_settings",
    "get_logging_settings",
    "get_notification_settings",
]
