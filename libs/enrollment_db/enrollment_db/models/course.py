from datetime import date
from enum import StrEnum
from uuid import uuid4

from sqlalchemy import Date, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from common.ids import CohortId, CohortMembershipId, CourseId, ProfileId
from enrollment_db.db import Base
from enrollment_db.models.enum_utils import str_enum_column


class MembershipRole(StrEnum):
    PARTICIPANT = "participant"
    FACILITATOR = "facilitator"


class Course(Base):
    """A course offered in one or more cohorts."""

    __tablename__ = "courses"

    id: Mapped[CourseId] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Used by the course welcome email; merge tags allowed
    welcome_email_subject: Mapped[str | None] = mapped_column(String(255), nullable=True)
    welcome_email_body: Mapped[str | None] = mapped_column(Text, nullable=True)


class Cohort(Base):
    """A dated run of a course."""

    __tablename__ = "cohorts"

    id: Mapped[CohortId] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    course_id: Mapped[CourseId] = mapped_column(Uuid(), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)


class CohortMembership(Base):
    """A participant's seat in a cohort. One row per (cohort, user)."""

    __tablename__ = "cohort_members"
    __table_args__ = (UniqueConstraint("cohort_id", "user_id", name="uq_cohort_members_cohort_user"),)

    id: Mapped[CohortMembershipId] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    cohort_id: Mapped[CohortId] = mapped_column(Uuid(), ForeignKey("cohorts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[ProfileId] = mapped_column(Uuid(), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    role: Mapped[MembershipRole] = mapped_column(str_enum_column(MembershipRole), nullable=False, default=MembershipRole.PARTICIPANT)
