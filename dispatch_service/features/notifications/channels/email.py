"""Email channel transport (simulated)."""

from __future__ import annotations

import random

from dispatch_service.features.notifications.channels.simulated import (
    check_simulation_params,
    simulate_round_trip,
)
from dispatch_service.infra.logging import get_logger

EMAIL_LATENCY_SECONDS = 0.8
EMAIL_SUCCESS_RATE = 0.90


class EmailTransport:
    """Stand-in for an email provider integration.

    Each attempt takes ``latency`` seconds and succeeds with probability
    ``success_rate`` (800ms / 90% by default).
    """

    channel = "email"

    def __init__(
        self,
        *,
        latency: float = EMAIL_LATENCY_SECONDS,
        success_rate: float = EMAIL_SUCCESS_RATE,
        rng: random.Random | None = None,
    ) -> None:
        check_simulation_params(latency, success_rate)
        self.latency = latency
        self.success_rate = success_rate
        self._rng = rng or random.Random()
        self._logger = get_logger(__name__, channel=self.channel)

    async def attempt(self, destination: str, subject: str, body: str) -> bool:
        sent = await simulate_round_trip(self.latency, self.success_rate, self._rng)
        if sent:
            self._logger.info(f"[EMAIL] Sent to: {destination}, Subject: {subject}")
        else:
            self._logger.warning(f"[EMAIL] Failed to send to: {destination}, Subject: {subject}")
        return sent
