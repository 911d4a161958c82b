from decimal import Decimal
from uuid import uuid4

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String, Text, Uuid, true
from sqlalchemy.orm import Mapped, mapped_column

from common.db.db_utils import Money
from common.ids import CohortId, CourseId, PaywallId
from enrollment_db.db import Base

DEFAULT_CHARGE_DAYS_BEFORE = 14


class Paywall(Base):
    """A purchasable offer: course price plus an optional equipment deposit."""

    __tablename__ = "paywalls"
    __table_args__ = (
        CheckConstraint("price >= 0", name="price_non_negative"),
        CheckConstraint("equipment_deposit >= 0", name="deposit_non_negative"),
    )

    id: Mapped[PaywallId] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    course_id: Mapped[CourseId | None] = mapped_column(Uuid(), ForeignKey("courses.id", ondelete="SET NULL"), nullable=True)
    cohort_id: Mapped[CohortId | None] = mapped_column(Uuid(), ForeignKey("cohorts.id", ondelete="SET NULL"), nullable=True)

    price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    equipment_deposit: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    # When false and the deposit is positive, the deposit is collected at checkout instead
    equipment_auto_charge: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=true(), default=True)
    equipment_charge_days_before: Mapped[int | None] = mapped_column(Integer, nullable=True, default=DEFAULT_CHARGE_DAYS_BEFORE)

    # Deactivation blocks new checkouts only
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=true(), default=True)

    confirmation_email_subject: Mapped[str | None] = mapped_column(String(255), nullable=True)
    confirmation_email_body: Mapped[str | None] = mapped_column(Text, nullable=True)
    welcome_email_subject: Mapped[str | None] = mapped_column(String(255), nullable=True)
    welcome_email_body: Mapped[str | None] = mapped_column(Text, nullable=True)
