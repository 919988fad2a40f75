"""Test utilities and helper functions.

Usage:
    from tests.utils import ScriptedTransport, SteppingClock, valid_payload

    transport = ScriptedTransport([False, True])  # fail once, then succeed
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any


class ScriptedTransport:
    """Transport returning (or raising) pre-programmed outcomes in order.

    Once the script is exhausted the last outcome repeats. Every call is
    recorded as a ``(destination, subject, body)`` tuple.
    """

    def __init__(self, outcomes: Iterable[bool | BaseException] = (True,)) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[tuple[str, str, str]] = []

    async def attempt(self, destination: str, subject: str, body: str) -> bool:
        self.calls.append((destination, subject, body))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class SteppingClock:
    """Clock advancing by one second on every read."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def valid_payload(**overrides: Any) -> dict[str, Any]:
    """Camel-case submit payload, optionally overridden per field."""
    payload: dict[str, Any] = {
        "userId": "user-123",
        "type": "email",
        "title": "Welcome",
        "message": "Thanks for signing up",
    }
    payload.update(overrides)
    return payload
