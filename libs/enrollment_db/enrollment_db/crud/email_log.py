from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from enrollment_db.models.email_log import EmailLogEntry
from enrollment_db.schemas.email_log import EmailLogCreate, EmailLogResponse


class EmailLogDAO:
    """Append-only: there is no update or delete."""

    async def create(self, db: AsyncSession, *, obj_in: EmailLogCreate) -> EmailLogResponse:
        entry = EmailLogEntry(**obj_in.model_dump())
        db.add(entry)
        await db.commit()
        await db.refresh(entry)
        return EmailLogResponse.model_validate(entry)

    async def list_for_recipient(self, db: AsyncSession, recipient_email: str) -> list[EmailLogResponse]:
        result = await db.execute(
            select(EmailLogEntry).where(EmailLogEntry.recipient_email == recipient_email).order_by(EmailLogEntry.created_at)
        )
        return [EmailLogResponse.model_validate(row) for row in result.scalars().all()]
