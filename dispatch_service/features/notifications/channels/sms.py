"""SMS channel transport (simulated)."""

from __future__ import annotations

import random

from dispatch_service.features.notifications.channels.simulated import (
    check_simulation_params,
    simulate_round_trip,
)
from dispatch_service.infra.logging import get_logger

SMS_LATENCY_SECONDS = 0.6
SMS_SUCCESS_RATE = 0.85
SMS_PREVIEW_LENGTH = 20


class SmsTransport:
    """Stand-in for an SMS gateway integration.

    SMS has no subject line; only the body is sent. Each attempt takes
    ``latency`` seconds and succeeds with probability ``success_rate``
    (600ms / 85% by default).
    """

    channel = "sms"

    def __init__(
        self,
        *,
        latency: float = SMS_LATENCY_SECONDS,
        success_rate: float = SMS_SUCCESS_RATE,
        rng: random.Random | None = None,
    ) -> None:
        check_simulation_params(latency, success_rate)
        self.latency = latency
        self.success_rate = success_rate
        self._rng = rng or random.Random()
        self._logger = get_logger(__name__, channel=self.channel)

    async def attempt(self, destination: str, subject: str, body: str) -> bool:
        sent = await simulate_round_trip(self.latency, self.success_rate, self._rng)
        preview = body[:SMS_PREVIEW_LENGTH]
        if sent:
            self._logger.info(f"[SMS] Sent to: {destination}, Message: {preview}...")
        else:
            self._logger.warning(f"[SMS] Failed to send to: {destination}, Message: {preview}...")
        return sent
