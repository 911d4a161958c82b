"""Course, cohort and membership schemas."""

from datetime import date, datetime

from pydantic import ConfigDict

from common.ids import CohortId, CohortMembershipId, CourseId, ProfileId
from common.utils.json_model import JsonModel
from enrollment_db.models.course import MembershipRole


class CourseCreate(JsonModel):
    title: str
    description: str | None = None
    welcome_email_subject: str | None = None
    welcome_email_body: str | None = None


class CourseResponse(CourseCreate):
    id: CourseId
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class CohortCreate(JsonModel):
    course_id: CourseId
    name: str
    start_date: date | None = None


class CohortResponse(CohortCreate):
    id: CohortId

    model_config = ConfigDict(from_attributes=True)


class CohortMembershipResponse(JsonModel):
    id: CohortMembershipId
    cohort_id: CohortId
    user_id: ProfileId
    role: MembershipRole
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
