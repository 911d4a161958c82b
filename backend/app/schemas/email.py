from uuid import UUID

from pydantic import BaseModel, Field

from common.ids import CohortId, CourseId
from common.utils.json_model import JsonModel


class SendEmailRequest(BaseModel):
    # Presence is checked by the dispatcher so the caller gets "Missing type or email"
    type: str | None = None
    email: str | None = None
    name: str | None = None
    user_id: UUID | None = None
    course_id: CourseId | None = None
    cohort_id: CohortId | None = None


class TestEmailRequest(JsonModel):
    to: str | None = None
    subject: str | None = None
    body: str | None = None
    custom_body: str | None = None


class EmailResult(JsonModel):
    success: bool
    message: str | None = None
    error: str | None = None


class MergeTagInfo(JsonModel):
    tag: str
    label: str
    description: str


class MergeTagList(JsonModel):
    tags: list[MergeTagInfo] = Field(default_factory=list)
