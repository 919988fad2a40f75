"""Notification dispatch feature.

Notifications are submitted for a user, delivered asynchronously through a
channel transport (email, SMS or in-app) and retried by a periodic sweep
until they are delivered or reach the retry limit.
"""

from dispatch_service.features.notifications.router import router
from dispatch_service.features.notifications.service import NotificationService

__all__ = ["NotificationService", "router"]
