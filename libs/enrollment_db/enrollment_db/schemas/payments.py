"""Pydantic schemas for payments and scheduled charges."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import ConfigDict, Field

from common.ids import CohortId, CourseId, PaymentId, PaywallId, ScheduledChargeId
from common.utils.json_model import JsonModel
from enrollment_db.models.payments import PaymentStatus, ScheduledChargeStatus


class PaymentCreate(JsonModel):
    stripe_session_id: str
    stripe_customer_id: str | None = None
    stripe_payment_intent_id: str | None = None
    paywall_id: PaywallId | None = None
    course_id: CourseId | None = None
    cohort_id: CohortId | None = None
    customer_email: str | None = None
    customer_name: str | None = None
    amount_total: Decimal
    currency: str = "usd"
    status: PaymentStatus = PaymentStatus.COMPLETED
    metadata_snapshot: dict[str, Any] = Field(default_factory=dict)


class PaymentResponse(PaymentCreate):
    id: PaymentId
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ScheduledChargeCreate(JsonModel):
    stripe_customer_id: str | None = None
    stripe_payment_intent_id: str | None = None
    customer_email: str | None = None
    amount: Decimal
    description: str
    charge_date: date
    paywall_id: PaywallId | None = None
    status: ScheduledChargeStatus = ScheduledChargeStatus.SCHEDULED


class ScheduledChargeResponse(ScheduledChargeCreate):
    id: ScheduledChargeId
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
