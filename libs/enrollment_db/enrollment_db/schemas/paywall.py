"""Paywall schemas shared by the admin API, checkout and webhook flows."""

from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, Field

from common.ids import CohortId, CourseId, PaywallId
from common.utils.json_model import JsonModel
from enrollment_db.models.paywall import DEFAULT_CHARGE_DAYS_BEFORE


class PaywallBase(JsonModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    course_id: CourseId | None = None
    cohort_id: CohortId | None = None
    price: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    equipment_deposit: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    equipment_auto_charge: bool = True
    equipment_charge_days_before: int | None = Field(default=DEFAULT_CHARGE_DAYS_BEFORE, ge=0)
    is_active: bool = True
    confirmation_email_subject: str | None = None
    confirmation_email_body: str | None = None
    welcome_email_subject: str | None = None
    welcome_email_body: str | None = None


class PaywallCreate(PaywallBase):
    """Slug is derived from the name when omitted."""

    slug: str | None = None


class PaywallUpdate(JsonModel):
    """Partial update; only fields that were sent are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = None
    description: str | None = None
    course_id: CourseId | None = None
    cohort_id: CohortId | None = None
    price: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    equipment_deposit: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    equipment_auto_charge: bool | None = None
    equipment_charge_days_before: int | None = Field(default=None, ge=0)
    is_active: bool | None = None
    confirmation_email_subject: str | None = None
    confirmation_email_body: str | None = None
    welcome_email_subject: str | None = None
    welcome_email_body: str | None = None


class PaywallResponse(PaywallBase):
    id: PaywallId
    slug: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def collects_deposit_at_checkout(self) -> bool:
        return self.equipment_deposit > 0 and not self.equipment_auto_charge

    @property
    def schedules_deposit_charge(self) -> bool:
        return self.equipment_deposit > 0 and self.equipment_auto_charge

    @property
    def checkout_total(self) -> Decimal:
        """Amount charged at checkout."""
        return self.price + self.equipment_deposit if self.collects_deposit_at_checkout else self.price
