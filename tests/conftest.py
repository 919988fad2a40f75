"""Pytest configuration and shared fixtures.

Organization:
    - Transport Fixtures: deterministic stand-ins for the channel transports
    - Engine Fixtures: repository, dispatcher and service wired with them
    - Application Fixtures: FastAPI app and HTTP client
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
import os

from httpx import ASGITransport, AsyncClient
import pytest

from dispatch_service.core.settings import NotificationSettings, clear_settings_cache
from dispatch_service.features.notifications.dispatcher import NotificationDispatcher
from dispatch_service.features.notifications.repository import InMemoryNotificationRepository
from dispatch_service.features.notifications.service import NotificationService
from tests.utils import ScriptedTransport, SteppingClock

# Tests never wait on the retry timer or on simulated network latency
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("NOTIFY_SWEEPER_ENABLED", "false")
os.environ.setdefault("NOTIFY_EMAIL_LATENCY_SECONDS", "0")
os.environ.setdefault("NOTIFY_SMS_LATENCY_SECONDS", "0")
os.environ.setdefault("LOG_JSON_LOGS", "false")


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Make every test read settings fresh from the environment."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# ============================================================================
# Transport Fixtures
# ============================================================================


@pytest.fixture
def email_transport() -> ScriptedTransport:
    return ScriptedTransport([True])


@pytest.fixture
def sms_transport() -> ScriptedTransport:
    return ScriptedTransport([True])


@pytest.fixture
def in_app_transport() -> ScriptedTransport:
    return ScriptedTransport([True])


# ============================================================================
# Engine Fixtures
# ============================================================================


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def repository(clock: SteppingClock) -> InMemoryNotificationRepository:
    """Fresh in-memory repository with a deterministic clock."""
    return InMemoryNotificationRepository(clock=clock)


@pytest.fixture
async def dispatcher(
    repository: InMemoryNotificationRepository,
    email_transport: ScriptedTransport,
    sms_transport: ScriptedTransport,
    in_app_transport: ScriptedTransport,
) -> AsyncGenerator[NotificationDispatcher]:
    dispatcher = NotificationDispatcher(
        repository,
        email=email_transport,
        sms=sms_transport,
        in_app=in_app_transport,
    )
    yield dispatcher
    await dispatcher.close()


@pytest.fixture
def notification_settings() -> NotificationSettings:
    return NotificationSettings(
        sweeper_enabled=False,
        email_latency_seconds=0,
        sms_latency_seconds=0,
    )


@pytest.fixture
async def service(
    repository: InMemoryNotificationRepository,
    notification_settings: NotificationSettings,
    email_transport: ScriptedTransport,
    sms_transport: ScriptedTransport,
    in_app_transport: ScriptedTransport,
) -> AsyncGenerator[NotificationService]:
    service = NotificationService(
        repository,
        settings=notification_settings,
        email=email_transport,
        sms=sms_transport,
        in_app=in_app_transport,
    )
    yield service
    await service.shutdown()


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(service: NotificationService):
    """FastAPI application bound to the test service.

    ASGITransport does not run the lifespan, so the service is injected
    directly on ``app.state``.
    """
    from dispatch_service.app.main import create_app

    return create_app(service=service)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client for the test application."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
