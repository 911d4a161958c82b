from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict

from common.ids import EmailLogId
from common.utils.json_model import JsonModel
from enrollment_db.models.email_log import EmailSourceType, EmailStatus, EmailType


class EmailLogCreate(JsonModel):
    recipient_email: str
    recipient_name: str | None = None
    email_type: EmailType
    subject: str
    body: str
    source_type: EmailSourceType | None = None
    source_id: UUID | None = None
    status: EmailStatus


class EmailLogResponse(EmailLogCreate):
    id: EmailLogId
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
