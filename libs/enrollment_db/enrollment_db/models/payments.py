"""Payment records and deferred equipment-deposit charges.

`Payment.stripe_session_id` is unique: one row per completed checkout session,
so replayed webhooks cannot record the same payment twice.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Any
from uuid import uuid4

from sqlalchemy import Date, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from common.db.db_utils import JsonB, Money
from common.ids import CohortId, CourseId, PaymentId, PaywallId, ScheduledChargeId
from enrollment_db.db import Base
from enrollment_db.models.enum_utils import str_enum_column


class PaymentStatus(StrEnum):
    COMPLETED = "completed"


class ScheduledChargeStatus(StrEnum):
    SCHEDULED = "scheduled"
    CHARGED = "charged"
    FAILED = "failed"
    CANCELED = "canceled"


class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[PaymentId] = mapped_column(Uuid(), primary_key=True, default=uuid4)

    stripe_session_id: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    stripe_payment_intent_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    paywall_id: Mapped[PaywallId | None] = mapped_column(Uuid(), ForeignKey("paywalls.id", ondelete="SET NULL"), nullable=True)
    course_id: Mapped[CourseId | None] = mapped_column(Uuid(), ForeignKey("courses.id", ondelete="SET NULL"), nullable=True)
    cohort_id: Mapped[CohortId | None] = mapped_column(Uuid(), ForeignKey("cohorts.id", ondelete="SET NULL"), nullable=True)

    customer_email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)
    customer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    amount_total: Mapped[Decimal] = mapped_column(Money, nullable=False)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="usd")
    status: Mapped[PaymentStatus] = mapped_column(str_enum_column(PaymentStatus), nullable=False, default=PaymentStatus.COMPLETED)

    # `metadata` is reserved on declarative classes
    metadata_snapshot: Mapped[dict[str, Any]] = mapped_column("metadata", JsonB, nullable=False, default=dict)


class ScheduledCharge(Base):
    """An off-session charge to be executed on `charge_date` by a separate job."""

    __tablename__ = "scheduled_charges"

    id: Mapped[ScheduledChargeId] = mapped_column(Uuid(), primary_key=True, default=uuid4)

    stripe_customer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    stripe_payment_intent_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    customer_email: Mapped[str | None] = mapped_column(String(320), nullable=True)

    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    charge_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    paywall_id: Mapped[PaywallId | None] = mapped_column(Uuid(), ForeignKey("paywalls.id", ondelete="SET NULL"), nullable=True)
    status: Mapped[ScheduledChargeStatus] = mapped_column(
        str_enum_column(ScheduledChargeStatus), nullable=False, default=ScheduledChargeStatus.SCHEDULED
    )
