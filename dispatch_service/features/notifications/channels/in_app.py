"""In-app channel transport."""

from __future__ import annotations

from dispatch_service.infra.logging import get_lazy_logger

lazy_logger = get_lazy_logger(__name__)


class InAppTransport:
    """In-app notifications live in the repository itself.

    No external action is needed, so delivery always succeeds immediately.
    """

    channel = "in-app"

    async def attempt(self, destination: str, subject: str, body: str) -> bool:
        lazy_logger.debug(lambda: f"In-app notification available for user {destination}")
        return True
