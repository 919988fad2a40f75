"""Tests for application lifespan and factory."""

from __future__ import annotations

import pytest

from dispatch_service.app import lifespan as lifespan_module
from dispatch_service.app.main import create_app
from dispatch_service.core.settings import AppSettings
from dispatch_service.features.notifications.service import NotificationService


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch: pytest.MonkeyPatch):
    """Keep dictConfig from replacing pytest's log capture."""
    monkeypatch.setattr(lifespan_module, "setup_logging", lambda *args, **kwargs: None)


@pytest.mark.asyncio
async def test_lifespan_creates_and_shuts_down_service(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("NOTIFY_SWEEPER_ENABLED", "true")
    app = create_app()

    async with lifespan_module.lifespan(app):
        service = app.state.notification_service
        assert isinstance(service, NotificationService)
        assert service.sweeper.running

    assert not service.sweeper.running


@pytest.mark.asyncio
async def test_lifespan_keeps_injected_service(service):
    app = create_app(service=service)

    async with lifespan_module.lifespan(app):
        assert app.state.notification_service is service
        assert not service.sweeper.running


def test_routes_mounted_under_api_prefix():
    app = create_app(app_settings=AppSettings(api_prefix="/v2"))

    paths = app.openapi()["paths"]

    assert "/v2/notifications" in paths
    assert "/v2/users/{user_id}/notifications" in paths
    assert "/v2/notifications/stats" in paths
    assert "/v2/notifications/{notification_id}/retry" in paths
    assert "/metrics" in paths


@pytest.mark.asyncio
async def test_missing_service_is_a_server_error():
    from httpx import ASGITransport, AsyncClient

    app = create_app()
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/notifications/stats")

    assert response.status_code == 500
