"""Checkout-related Pydantic schemas (Stripe)."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from common.ids import CohortId, CourseId, PaywallId
from common.utils.json_model import JsonModel

_LEADING_INTEGER = re.compile(r"\s*[+-]?\d+")
_LEADING_DECIMAL = re.compile(r"\s*[+-]?(\d+(\.\d*)?|\.\d+)")


class CheckoutRequest(BaseModel):
    # Optional here so a missing id is reported as "Missing paywall_id" rather than a schema error
    paywall_id: PaywallId | None = None
    customer_email: str | None = None
    customer_name: str | None = None


class CheckoutResponse(JsonModel):
    session_id: str
    url: str | None = None


class CheckoutMetadata(BaseModel):
    """What was purchased, carried through the processor as session metadata.

    Stripe only stores string values, so `to_stripe` flattens the model and
    `from_stripe` is the single place where those strings are parsed back.
    """

    paywall_id: PaywallId | None = None
    course_id: CourseId | None = None
    cohort_id: CohortId | None = None
    equipment_deposit: Decimal = Decimal("0")
    equipment_auto_charge: bool = False
    equipment_charge_days_before: int | None = None

    @field_validator("paywall_id", "course_id", "cohort_id", mode="before")
    @classmethod
    def _parse_id(cls, value: Any) -> UUID | None:
        # Sessions created outside this service can carry ids of their own
        if value in ("", None):
            return None
        if isinstance(value, UUID):
            return value
        try:
            return UUID(str(value).strip())
        except ValueError:
            return None

    @field_validator("equipment_deposit", mode="before")
    @classmethod
    def _parse_deposit(cls, value: Any) -> Decimal:
        if isinstance(value, Decimal) and value.is_finite():
            return value
        match = _LEADING_DECIMAL.match(str(value or ""))
        if match is None:
            return Decimal("0")
        try:
            return Decimal(match.group())
        except InvalidOperation:
            return Decimal("0")

    @field_validator("equipment_auto_charge", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() == "true"

    @field_validator("equipment_charge_days_before", mode="before")
    @classmethod
    def _parse_days(cls, value: Any) -> int | None:
        """Leading integer, so "14.5" reads as 14 and "10 days" as 10."""
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        match = _LEADING_INTEGER.match(str(value or ""))
        return int(match.group()) if match else None

    def to_stripe(self) -> dict[str, str]:
        return {
            "paywall_id": str(self.paywall_id) if self.paywall_id else "",
            "course_id": str(self.course_id) if self.course_id else "",
            "cohort_id": str(self.cohort_id) if self.cohort_id else "",
            "equipment_deposit": str(self.equipment_deposit),
            "equipment_auto_charge": "true" if self.equipment_auto_charge else "false",
            "equipment_charge_days_before": "" if self.equipment_charge_days_before is None else str(self.equipment_charge_days_before),
        }

    @classmethod
    def from_stripe(cls, metadata: dict[str, str] | None) -> CheckoutMetadata:
        return cls.model_validate(metadata or {})


class ProductData(BaseModel):
    name: str
    description: str


class PriceData(BaseModel):
    currency: str = "usd"
    product_data: ProductData
    unit_amount: int = Field(..., ge=0, description="Amount in minor units (cents)")


class LineItem(BaseModel):
    price_data: PriceData
    quantity: int = 1


class SetupFutureUsage(StrEnum):
    OFF_SESSION = "off_session"


class PaymentIntentData(BaseModel):
    setup_future_usage: SetupFutureUsage


class CheckoutSessionParams(BaseModel):
    """Request body for `checkout.sessions.create`."""

    mode: Literal["payment"] = "payment"
    payment_method_types: list[str] = Field(default_factory=lambda: ["card"])
    line_items: list[LineItem]
    success_url: str
    cancel_url: str
    metadata: dict[str, str]
    customer_email: str | None = None
    payment_intent_data: PaymentIntentData | None = None

    @property
    def total_minor_units(self) -> int:
        return sum(item.price_data.unit_amount * item.quantity for item in self.line_items)

    def to_stripe(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class CheckoutSessionResult(BaseModel):
    id: str
    url: str | None = None
