"""DAOs for payments and scheduled charges."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from common.ids import PaywallId
from common.utils.utils import get_logger
from enrollment_db.models.course import Cohort, Course
from enrollment_db.models.payments import Payment, ScheduledCharge
from enrollment_db.models.paywall import Paywall
from enrollment_db.schemas.payments import PaymentCreate, PaymentResponse, ScheduledChargeCreate, ScheduledChargeResponse

logger = get_logger(__name__)

_LINKS = (("paywall_id", Paywall), ("course_id", Course), ("cohort_id", Cohort))


class PaymentDAO:
    async def insert_if_absent(self, db: AsyncSession, *, obj_in: PaymentCreate) -> PaymentResponse | None:
        """Insert a payment if its session id was not seen before.
        Returns the created payment, or None if duplicate.

        Any other integrity failure (e.g. a referenced paywall that no longer
        exists) is re-raised.
        """
        payment = Payment(**obj_in.model_dump())
        try:
            db.add(payment)
            await db.commit()
            await db.refresh(payment)
            return PaymentResponse.model_validate(payment)
        except IntegrityError:
            await db.rollback()
            if await self.get_by_session_id(db, stripe_session_id=obj_in.stripe_session_id) is None:
                raise
            logger.info("Duplicate stripe_session_id, skipping payment", stripe_session_id=obj_in.stripe_session_id)
            return None

    async def missing_links(self, db: AsyncSession, obj_in: PaymentCreate) -> list[str]:
        """Names of the paywall/course/cohort reference fields that point at no row."""
        missing: list[str] = []
        for field, model in _LINKS:
            value = getattr(obj_in, field)
            if value is not None and await db.get(model, value) is None:
                missing.append(field)
        return missing

    async def get_by_session_id(self, db: AsyncSession, *, stripe_session_id: str) -> PaymentResponse | None:
        result = await db.execute(select(Payment).where(Payment.stripe_session_id == stripe_session_id))
        row = result.scalar_one_or_none()
        return PaymentResponse.model_validate(row) if row else None

    async def count_by_session_id(self, db: AsyncSession, *, stripe_session_id: str) -> int:
        result = await db.execute(select(Payment.id).where(Payment.stripe_session_id == stripe_session_id))
        return len(result.scalars().all())


class ScheduledChargeDAO:
    async def create(self, db: AsyncSession, *, obj_in: ScheduledChargeCreate) -> ScheduledChargeResponse:
        charge = ScheduledCharge(**obj_in.model_dump())
        db.add(charge)
        await db.commit()
        await db.refresh(charge)
        return ScheduledChargeResponse.model_validate(charge)

    async def list_for_paywall(self, db: AsyncSession, paywall_id: PaywallId) -> list[ScheduledChargeResponse]:
        result = await db.execute(
            select(ScheduledCharge).where(ScheduledCharge.paywall_id == paywall_id).order_by(ScheduledCharge.charge_date)
        )
        return [ScheduledChargeResponse.model_validate(row) for row in result.scalars().all()]
