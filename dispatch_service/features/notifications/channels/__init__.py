"""Channel transports for notification delivery.

- Email: simulated remote delivery (latency + success probability)
- SMS: simulated remote delivery (latency + success probability)
- In-App: local, always succeeds

All implement the ``Transport`` protocol: ``attempt(destination, subject, body) -> bool``.
"""

from __future__ import annotations

from dispatch_service.features.notifications.channels.base import (
    Transport,
    TransportError,
    UnsupportedChannelError,
)
from dispatch_service.features.notifications.channels.email import EmailTransport
from dispatch_service.features.notifications.channels.in_app import InAppTransport
from dispatch_service.features.notifications.channels.sms import SmsTransport

__all__ = [
    "EmailTransport",
    "InAppTransport",
    "SmsTransport",
    "Transport",
    "TransportError",
    "UnsupportedChannelError",
]
