from enum import StrEnum
from uuid import UUID, uuid4

from sqlalchemy import String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from common.ids import EmailLogId
from enrollment_db.db import Base
from enrollment_db.models.enum_utils import str_enum_column


class EmailType(StrEnum):
    PAYMENT_CONFIRMATION = "payment_confirmation"
    PAYWALL_WELCOME = "paywall_welcome"
    COURSE_WELCOME = "course_welcome"
    TEST = "test"


class EmailSourceType(StrEnum):
    PAYWALL = "paywall"
    COURSE = "course"


class EmailStatus(StrEnum):
    SENT = "sent"
    FAILED = "failed"


class EmailLogEntry(Base):
    """Append-only record of every transactional email attempt."""

    __tablename__ = "email_log"

    id: Mapped[EmailLogId] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    recipient_email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    recipient_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email_type: Mapped[EmailType] = mapped_column(str_enum_column(EmailType), nullable=False)
    subject: Mapped[str] = mapped_column(String(512), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    source_type: Mapped[EmailSourceType | None] = mapped_column(str_enum_column(EmailSourceType), nullable=True)
    source_id: Mapped[UUID | None] = mapped_column(Uuid(), nullable=True)
    status: Mapped[EmailStatus] = mapped_column(str_enum_column(EmailStatus), nullable=False)
