from datetime import datetime

from pydantic import ConfigDict

from common.ids import CohortId, CourseId, PaywallId, PendingEnrollmentId
from common.utils.json_model import JsonModel
from enrollment_db.models.enrollment import PendingEnrollmentStatus


class PendingEnrollmentCreate(JsonModel):
    email: str
    name: str | None = None
    paywall_id: PaywallId | None = None
    course_id: CourseId | None = None
    cohort_id: CohortId | None = None
    stripe_session_id: str | None = None
    status: PendingEnrollmentStatus = PendingEnrollmentStatus.PENDING


class PendingEnrollmentResponse(PendingEnrollmentCreate):
    id: PendingEnrollmentId
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
