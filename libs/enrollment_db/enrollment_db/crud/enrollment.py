from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from enrollment_db.models.enrollment import PendingEnrollment, PendingEnrollmentStatus
from enrollment_db.schemas.enrollment import PendingEnrollmentCreate, PendingEnrollmentResponse


class PendingEnrollmentDAO:
    async def create(self, db: AsyncSession, *, obj_in: PendingEnrollmentCreate) -> PendingEnrollmentResponse:
        pending = PendingEnrollment(**obj_in.model_dump())
        db.add(pending)
        await db.commit()
        await db.refresh(pending)
        return PendingEnrollmentResponse.model_validate(pending)

    async def list_pending_for_email(self, db: AsyncSession, email: str) -> list[PendingEnrollmentResponse]:
        result = await db.execute(
            select(PendingEnrollment).where(
                func.lower(PendingEnrollment.email) == email.strip().lower(),
                PendingEnrollment.status == PendingEnrollmentStatus.PENDING,
            )
        )
        return [PendingEnrollmentResponse.model_validate(row) for row in result.scalars().all()]
