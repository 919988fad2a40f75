"""Simulated network round trip shared by the email and SMS channels."""

from __future__ import annotations

import asyncio
import random


def check_simulation_params(latency: float, success_rate: float) -> None:
    if not 0.0 <= success_rate <= 1.0:
        msg = f"success_rate must be within [0, 1], got {success_rate}"
        raise ValueError(msg)
    if latency < 0:
        msg = f"latency must be non-negative, got {latency}"
        raise ValueError(msg)


async def simulate_round_trip(
    latency: float,
    success_rate: float,
    rng: random.Random,
) -> bool:
    """Wait ``latency`` seconds, then succeed with probability ``success_rate``.

    Each call makes an independent draw from ``rng``.
    """
    await asyncio.sleep(latency)
    return rng.random() < success_rate
