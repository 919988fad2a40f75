"""Base protocol and errors for channel transports."""

from __future__ import annotations

from typing import Protocol


class TransportError(Exception):
    """A transport failed unexpectedly (as opposed to reporting non-delivery)."""


class UnsupportedChannelError(LookupError):
    """No transport is configured for a notification type.

    This is a configuration fault, not a delivery failure.
    """


class Transport(Protocol):
    """Capability shared by every channel.

    Implementations return False when the message could not be delivered
    and raise ``TransportError`` (or anything else) when the attempt itself
    broke. Callers treat both as a failed delivery.
    """

    async def attempt(self, destination: str, subject: str, body: str) -> bool:
        """Attempt delivery of one message.

        Args:
            destination: Recipient address (the notification's user id)
            subject: Subject line (ignored by channels without one)
            body: Message body

        Returns:
            True if the message was delivered
        """
        ...
