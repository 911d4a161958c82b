"""Unit tests for PaywallAdminService."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from app.services.paywall_admin_service import PaywallAdminService, slugify
from common.core.app_error import AppException, Errors
from enrollment_db.crud.paywall import PaywallDAO
from enrollment_db.schemas.paywall import PaywallCreate, PaywallUpdate


@pytest.fixture
def service() -> PaywallAdminService:
    return PaywallAdminService(PaywallDAO())


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Capacity Program", "capacity-program"),
        ("  Spring 2026: VR Kit!  ", "spring-2026-vr-kit"),
        ("already-a-slug", "already-a-slug"),
        ("!!!", ""),
    ],
)
def test_slugify(value: str, expected: str) -> None:
    assert slugify(value) == expected


@pytest.mark.asyncio
async def test_create_derives_slug_from_name(session, service) -> None:
    paywall = await service.create_paywall(session, paywall_in=PaywallCreate(name="Capacity Program", price=Decimal("500")))

    assert paywall.slug == "capacity-program"
    assert paywall.is_active
    assert paywall.equipment_charge_days_before == 14


@pytest.mark.asyncio
async def test_create_rejects_duplicate_slug(session, service) -> None:
    await service.create_paywall(session, paywall_in=PaywallCreate(name="Capacity Program"))

    with pytest.raises(AppException) as exc_info:
        await service.create_paywall(session, paywall_in=PaywallCreate(name="Other", slug="Capacity  Program"))

    assert Errors.Paywall.SLUG_TAKEN.is_(exc_info.value)
    assert exc_info.value.http_status == 409


@pytest.mark.asyncio
async def test_create_rejects_name_without_slug_characters(session, service) -> None:
    with pytest.raises(AppException) as exc_info:
        await service.create_paywall(session, paywall_in=PaywallCreate(name="???"))

    assert Errors.Paywall.INVALID_NAME.is_(exc_info.value)


@pytest.mark.asyncio
async def test_create_with_missing_course_is_not_a_slug_conflict(session, service) -> None:
    with pytest.raises(AppException) as exc_info:
        await service.create_paywall(session, paywall_in=PaywallCreate(name="Orphan Offer", course_id=uuid4()))

    assert Errors.Paywall.INVALID_REFERENCE.is_(exc_info.value)
    assert exc_info.value.http_status == 400
    assert await service.list_paywalls(session) == []


@pytest.mark.asyncio
async def test_update_to_missing_cohort_is_rejected(session, service) -> None:
    paywall = await service.create_paywall(session, paywall_in=PaywallCreate(name="Capacity Program"))

    with pytest.raises(AppException) as exc_info:
        await service.update_paywall(session, paywall.id, paywall_in=PaywallUpdate(cohort_id=uuid4()))

    assert Errors.Paywall.INVALID_REFERENCE.is_(exc_info.value)
    assert (await service.get_paywall(session, paywall.id)).cohort_id is None


@pytest.mark.asyncio
async def test_update_applies_only_sent_fields(session, service) -> None:
    created = await service.create_paywall(
        session, paywall_in=PaywallCreate(name="Capacity Program", description="Keep me", price=Decimal("500"))
    )

    updated = await service.update_paywall(
        session, created.id, paywall_in=PaywallUpdate(price=Decimal("650.00"), slug="Capacity Program 2026")
    )

    assert updated.price == Decimal("650.00")
    assert updated.slug == "capacity-program-2026"
    assert updated.description == "Keep me"


@pytest.mark.asyncio
async def test_update_keeps_own_slug_but_rejects_others(session, service) -> None:
    first = await service.create_paywall(session, paywall_in=PaywallCreate(name="First"))
    second = await service.create_paywall(session, paywall_in=PaywallCreate(name="Second"))

    same = await service.update_paywall(session, first.id, paywall_in=PaywallUpdate(slug="first"))
    with pytest.raises(AppException) as exc_info:
        await service.update_paywall(session, second.id, paywall_in=PaywallUpdate(slug="first"))

    assert same.slug == "first"
    assert Errors.Paywall.SLUG_TAKEN.is_(exc_info.value)


@pytest.mark.asyncio
async def test_toggle_flips_active_flag(session, service) -> None:
    created = await service.create_paywall(session, paywall_in=PaywallCreate(name="Toggle Me"))

    off = await service.toggle_paywall(session, created.id)
    on = await service.toggle_paywall(session, created.id)

    assert off.is_active is False
    assert on.is_active is True


@pytest.mark.asyncio
async def test_missing_paywall_is_not_found(session, service) -> None:
    missing = uuid4()

    for action in (
        service.get_paywall(session, missing),
        service.toggle_paywall(session, missing),
        service.delete_paywall(session, missing),
        service.update_paywall(session, missing, paywall_in=PaywallUpdate(name="x")),
    ):
        with pytest.raises(AppException) as exc_info:
            await action
        assert Errors.Generic.NOT_FOUND.is_(exc_info.value)


@pytest.mark.asyncio
async def test_delete_removes_paywall(session, service) -> None:
    created = await service.create_paywall(session, paywall_in=PaywallCreate(name="Short Lived"))

    await service.delete_paywall(session, created.id)

    assert await service.list_paywalls(session) == []
