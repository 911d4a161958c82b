"""Unit tests for ScheduledChargePlanner."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from app.schemas.checkout import CheckoutMetadata
from app.schemas.stripe_events import CheckoutSessionObject, CustomerDetails
from app.services.charge_planner import ScheduledChargePlanner
from enrollment_db.crud.payments import ScheduledChargeDAO
from enrollment_db.models.payments import ScheduledChargeStatus
from enrollment_db.schemas.course import CohortResponse


def _session() -> CheckoutSessionObject:
    return CheckoutSessionObject(
        id="cs_test_planner",
        customer="cus_1",
        payment_intent="pi_1",
        customer_details=CustomerDetails(email="jo@example.com"),
    )


def _cohort(start_date: date | None) -> CohortResponse:
    return CohortResponse(id=uuid4(), course_id=uuid4(), name="Spring", start_date=start_date)


@pytest.mark.parametrize(
    ("days_before", "expected"),
    [
        (14, date(2026, 3, 1)),
        (None, date(2026, 3, 1)),
        (0, date(2026, 3, 1)),
        (7, date(2026, 3, 8)),
        (30, date(2026, 2, 13)),
    ],
)
def test_compute_charge_date(days_before: int | None, expected: date) -> None:
    assert ScheduledChargePlanner.compute_charge_date(date(2026, 3, 15), days_before) == expected


def test_non_numeric_offset_falls_back_to_default() -> None:
    metadata = CheckoutMetadata.from_stripe({"equipment_charge_days_before": "soon"})

    assert metadata.equipment_charge_days_before is None
    assert ScheduledChargePlanner.compute_charge_date(date(2026, 3, 15), metadata.equipment_charge_days_before) == date(2026, 3, 1)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("auto_charge", "deposit", "start_date"),
    [
        (False, "150", date(2026, 3, 15)),
        (True, "0", date(2026, 3, 15)),
        (True, "150", None),
    ],
)
async def test_plan_is_noop_without_all_preconditions(auto_charge: bool, deposit: str, start_date: date | None) -> None:
    dao = MagicMock(spec=ScheduledChargeDAO)
    dao.create = AsyncMock()
    planner = ScheduledChargePlanner(dao)
    metadata = CheckoutMetadata(equipment_auto_charge=auto_charge, equipment_deposit=Decimal(deposit))

    result = await planner.plan(MagicMock(), _session(), metadata, _cohort(start_date))

    assert result is None
    dao.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_plan_is_noop_without_cohort() -> None:
    dao = MagicMock(spec=ScheduledChargeDAO)
    dao.create = AsyncMock()
    metadata = CheckoutMetadata(equipment_auto_charge=True, equipment_deposit=Decimal("150"))

    assert await ScheduledChargePlanner(dao).plan(MagicMock(), _session(), metadata, None) is None
    dao.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_plan_inserts_scheduled_charge(session, make_paywall) -> None:
    paywall = await make_paywall(equipment_deposit=Decimal("150.00"))
    dao = ScheduledChargeDAO()
    metadata = CheckoutMetadata(
        paywall_id=paywall.id,
        equipment_deposit=Decimal("150.00"),
        equipment_auto_charge=True,
        equipment_charge_days_before=14,
    )

    charge = await ScheduledChargePlanner(dao).plan(session, _session(), metadata, _cohort(date(2026, 3, 15)))

    assert charge is not None
    assert charge.charge_date == date(2026, 3, 1)
    assert charge.amount == Decimal("150.00")
    assert charge.description == "Equipment Deposit"
    assert charge.status == ScheduledChargeStatus.SCHEDULED
    assert charge.stripe_customer_id == "cus_1"
    assert charge.customer_email == "jo@example.com"
    assert [c.id for c in await dao.list_for_paywall(session, paywall.id)] == [charge.id]
