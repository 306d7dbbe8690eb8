"""Integration test fixtures: the FastAPI app on an in-memory database."""

from collections.abc import AsyncGenerator
from dataclasses import replace

import pytest
from httpx import ASGITransport, AsyncClient

from hr_payroll.api.app import create_app
from hr_payroll.api.dependencies import get_notifier, get_session_factory
from hr_payroll.config import Settings, get_settings
from hr_payroll.services.notifications import NotificationDispatcher


@pytest.fixture
def test_settings() -> Settings:
    return replace(
        Settings.from_env(),
        database_url="sqlite+aiosqlite://",
        engine_version="test",
        payroll_max_workers=1,
    )


@pytest.fixture
def notifications() -> list:
    """Events delivered through the dispatcher during a test."""
    return []


@pytest.fixture
def app(session_factory, test_settings, notifications):
    app = create_app()
    dispatcher = NotificationDispatcher()
    dispatcher.on_all(notifications.append)

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_notifier] = lambda: dispatcher
    return app


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
