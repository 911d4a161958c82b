"""Shared fixtures: an in-memory SQLite database and seeded catalogue rows."""

from __future__ import annotations

import hashlib
import hmac
import time
from collections.abc import AsyncGenerator, Callable
from datetime import date
from decimal import Decimal
from typing import Any
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.mail_sender import GmailSender
from common.db.db import Db
from common.utils.msgspec import encode_json
from enrollment_db.crud.course import CourseDAO
from enrollment_db.crud.paywall import PaywallDAO
from enrollment_db.crud.profile import ProfileDAO
from enrollment_db.db.init_db import init_db
from enrollment_db.schemas.course import CohortCreate, CohortResponse, CourseCreate, CourseResponse
from enrollment_db.schemas.paywall import PaywallCreate, PaywallResponse
from enrollment_db.schemas.profile import ProfileCreate, ProfileResponse

WEBHOOK_SECRET = "whsec_test_secret"


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[Db]:
    database = Db.from_url("sqlite+aiosqlite:///:memory:")
    await database.start()
    assert await init_db(database)
    yield database
    await database.stop()


@pytest_asyncio.fixture
async def session(db: Db) -> AsyncGenerator[AsyncSession]:
    async with db.new_session() as s:
        yield s


@pytest.fixture
def mail_sender() -> MagicMock:
    sender = MagicMock(spec=GmailSender)
    sender.send.return_value = True
    sender.is_configured = True
    return sender


@pytest_asyncio.fixture
async def course(session: AsyncSession) -> CourseResponse:
    return await CourseDAO().create(session, obj_in=CourseCreate(title="Capacity 101", description="Foundations"))


@pytest_asyncio.fixture
async def cohort(session: AsyncSession, course: CourseResponse) -> CohortResponse:
    return await CourseDAO().create_cohort(
        session, obj_in=CohortCreate(course_id=course.id, name="Spring 2026", start_date=date(2026, 3, 15))
    )


@pytest_asyncio.fixture
async def profile(session: AsyncSession) -> ProfileResponse:
    return await ProfileDAO().create(session, obj_in=ProfileCreate(email="jo@example.com", full_name="Jo Buyer"))


@pytest.fixture
def make_paywall(session: AsyncSession) -> Callable[..., Any]:
    """Factory for paywalls; keyword arguments override PaywallCreate fields."""

    async def _make(**overrides: Any) -> PaywallResponse:
        fields: dict[str, Any] = {"name": "Capacity Program", "price": Decimal("500.00")}
        fields.update(overrides)
        slug = fields.pop("slug", None) or f"offer-{uuid4().hex[:8]}"
        return await PaywallDAO().create(session, obj_in=PaywallCreate(**fields), slug=slug)

    return _make


@pytest.fixture
def webhook_secret() -> str:
    return WEBHOOK_SECRET


@pytest.fixture
def sign_payload() -> Callable[..., str]:
    """Build a ``Stripe-Signature`` header the way Stripe does."""

    def _sign(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
        ts = int(time.time()) if timestamp is None else timestamp
        signed = f"{ts}.{payload.decode('utf-8')}".encode()
        signature = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
        return f"t={ts},v1={signature}"

    return _sign


@pytest.fixture
def checkout_event() -> Callable[..., bytes]:
    """Serialized ``checkout.session.completed`` event."""

    def _event(
        *,
        session_id: str = "cs_test_123",
        email: str | None = "jo@example.com",
        name: str | None = "Jo Buyer",
        amount_total: int = 50000,
        metadata: dict[str, str] | None = None,
        event_type: str = "checkout.session.completed",
    ) -> bytes:
        return encode_json(
            {
                "id": f"evt_{session_id}",
                "object": "event",
                "type": event_type,
                "data": {
                    "object": {
                        "id": session_id,
                        "object": "checkout.session",
                        "customer": "cus_123",
                        "payment_intent": "pi_123",
                        "customer_email": None,
                        "customer_details": {"email": email, "name": name},
                        "amount_total": amount_total,
                        "currency": "usd",
                        "metadata": metadata or {},
                    }
                },
            }
        )

    return _event
