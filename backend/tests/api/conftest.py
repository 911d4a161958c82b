"""Application fixtures: a started service container behind an in-process HTTP client.

The app and the test share one in-memory SQLite connection, so seeding and
inspection go through short-lived sessions opened with ``run_in_db``.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from app.main import create_app
from app.service_container import Services
from common.core.config_service import AdminSection, ConfigService, DatabaseSection, GmailSection, SiteSection, StripeSection

ADMIN_TOKEN = "admin-test-token"
SITE_URL = "https://school.example.com"


@pytest.fixture
def config_service(webhook_secret: str) -> ConfigService:
    config = ConfigService(env="test", load_files=False)
    config.stripe = StripeSection(secret_key="sk_test_123", webhook_secret=webhook_secret)
    config.database = DatabaseSection(url="sqlite+aiosqlite:///:memory:")
    config.admin = AdminSection(api_token=ADMIN_TOKEN)
    config.site = SiteSection(url=SITE_URL)
    config.gmail = GmailSection(sender_email="team@example.com")
    return config


@pytest_asyncio.fixture
async def services(config_service: ConfigService, mail_sender: MagicMock) -> AsyncGenerator[Services]:
    container = Services(config_service)
    container.mail_sender = mail_sender
    assert container.payment_gateway is not None
    container.payment_gateway._client = MagicMock()
    await container.start()
    yield container
    await container.stop()


@pytest_asyncio.fixture
async def client(services: Services) -> AsyncGenerator[httpx.AsyncClient]:
    app = create_app(services=services, configure_logging=False)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def stripe_sessions(services: Services) -> MagicMock:
    """The mocked ``client.v1.checkout.sessions`` resource."""
    assert services.payment_gateway is not None
    return services.payment_gateway._client.v1.checkout.sessions


@pytest.fixture
def run_in_db(services: Services) -> Callable[[Callable[[AsyncSession], Awaitable[Any]]], Awaitable[Any]]:
    async def _run(action: Callable[[AsyncSession], Awaitable[Any]]) -> Any:
        assert services.db is not None
        async with services.db.new_session() as session:
            return await action(session)

    return _run


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}
