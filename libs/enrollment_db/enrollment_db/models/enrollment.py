from enum import StrEnum
from uuid import uuid4

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from common.ids import CohortId, CourseId, PaywallId, PendingEnrollmentId
from enrollment_db.db import Base
from enrollment_db.models.enum_utils import str_enum_column


class PendingEnrollmentStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"


class PendingEnrollment(Base):
    """Purchase by an email with no account yet, consumed when that email registers."""

    __tablename__ = "pending_enrollments"

    id: Mapped[PendingEnrollmentId] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    paywall_id: Mapped[PaywallId | None] = mapped_column(Uuid(), ForeignKey("paywalls.id", ondelete="SET NULL"), nullable=True)
    course_id: Mapped[CourseId | None] = mapped_column(Uuid(), ForeignKey("courses.id", ondelete="SET NULL"), nullable=True)
    cohort_id: Mapped[CohortId | None] = mapped_column(Uuid(), ForeignKey("cohorts.id", ondelete="SET NULL"), nullable=True)

    stripe_session_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[PendingEnrollmentStatus] = mapped_column(
        str_enum_column(PendingEnrollmentStatus), nullable=False, default=PendingEnrollmentStatus.PENDING
    )
