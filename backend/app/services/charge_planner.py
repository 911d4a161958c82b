"""Scheduled Charge Planner for auto-charged equipment deposits."""

from __future__ import annotations

from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.checkout import CheckoutMetadata
from app.schemas.stripe_events import CheckoutSessionObject
from common.utils.utils import get_logger
from enrollment_db.crud.payments import ScheduledChargeDAO
from enrollment_db.models.paywall import DEFAULT_CHARGE_DAYS_BEFORE
from enrollment_db.schemas.course import CohortResponse
from enrollment_db.schemas.payments import ScheduledChargeCreate, ScheduledChargeResponse

logger = get_logger()

EQUIPMENT_DEPOSIT_DESCRIPTION = "Equipment Deposit"


class ScheduledChargePlanner:
    def __init__(self, scheduled_charge_dao: ScheduledChargeDAO) -> None:
        self.scheduled_charge_dao = scheduled_charge_dao

    @staticmethod
    def compute_charge_date(start_date: date, days_before: int | None) -> date:
        """`days_before` falls back to the default when missing or zero."""
        return start_date - timedelta(days=days_before or DEFAULT_CHARGE_DAYS_BEFORE)

    async def plan(
        self,
        db: AsyncSession,
        session: CheckoutSessionObject,
        metadata: CheckoutMetadata,
        cohort: CohortResponse | None,
    ) -> ScheduledChargeResponse | None:
        """Queue the deposit charge if the purchase asked for one.

        Returns None without writing anything unless auto-charge is on, the
        deposit is positive and the cohort has a start date.
        """
        if not metadata.equipment_auto_charge or metadata.equipment_deposit <= 0:
            return None
        if cohort is None or cohort.start_date is None:
            logger.info("No cohort start date, deposit charge not scheduled", session_id=session.id)
            return None

        charge_date = self.compute_charge_date(cohort.start_date, metadata.equipment_charge_days_before)
        charge = await self.scheduled_charge_dao.create(
            db,
            obj_in=ScheduledChargeCreate(
                stripe_customer_id=session.customer,
                stripe_payment_intent_id=session.payment_intent,
                customer_email=session.buyer_email,
                amount=metadata.equipment_deposit,
                description=EQUIPMENT_DEPOSIT_DESCRIPTION,
                charge_date=charge_date,
                paywall_id=metadata.paywall_id,
            ),
        )
        logger.info("Equipment deposit charge scheduled", session_id=session.id, charge_date=charge_date, amount=charge.amount)
        return charge
