"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the process.

Usage:
    from dispatch_service.core.settings.loader import get_notification_settings

    settings = get_notification_settings()  # First call: loads and validates
    settings = get_notification_settings()  # Subsequent calls: returns cached instance

Testing:
    In tests, clear the cache to force reload:
    get_notification_settings.cache_clear()

    Or construct an instance directly:
    settings = NotificationSettings(max_retries=1)
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .logs import LoggingSettings
from .notifications import NotificationSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached FastAPI application settings.

    Returns:
        Validated and frozen AppSettings instance.
    """
    return AppSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_notification_settings() -> NotificationSettings:
    """Get cached notification dispatch settings.

    Returns:
        Validated and frozen NotificationSettings instance.
    """
    return NotificationSettings()


def clear_settings_cache() -> None:
    """Drop every cached settings instance (tests, reloads)."""
    get_app_settings.cache_clear()
    get_logging_settings.cache_clear()
    get_notification_settings.cache_clear()
