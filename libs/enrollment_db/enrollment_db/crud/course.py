from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from common.ids import CohortId, CourseId, ProfileId
from common.utils.utils import get_logger
from enrollment_db.models.course import Cohort, CohortMembership, Course, MembershipRole
from enrollment_db.schemas.course import CohortCreate, CohortMembershipResponse, CohortResponse, CourseCreate, CourseResponse

logger = get_logger(__name__)


class CourseDAO:
    """Courses and their cohorts. Returns Pydantic objects."""

    async def get(self, db: AsyncSession, id: CourseId) -> CourseResponse | None:
        result = await db.execute(select(Course).where(Course.id == id))
        course = result.scalar_one_or_none()
        return CourseResponse.model_validate(course) if course else None

    async def create(self, db: AsyncSession, *, obj_in: CourseCreate) -> CourseResponse:
        course = Course(**obj_in.model_dump())
        db.add(course)
        await db.commit()
        await db.refresh(course)
        return CourseResponse.model_validate(course)

    async def get_cohort(self, db: AsyncSession, id: CohortId) -> CohortResponse | None:
        result = await db.execute(select(Cohort).where(Cohort.id == id))
        cohort = result.scalar_one_or_none()
        return CohortResponse.model_validate(cohort) if cohort else None

    async def create_cohort(self, db: AsyncSession, *, obj_in: CohortCreate) -> CohortResponse:
        cohort = Cohort(**obj_in.model_dump())
        db.add(cohort)
        await db.commit()
        await db.refresh(cohort)
        return CohortResponse.model_validate(cohort)


class CohortMembershipDAO:
    async def get(self, db: AsyncSession, *, cohort_id: CohortId, user_id: ProfileId) -> CohortMembershipResponse | None:
        result = await db.execute(
            select(CohortMembership).where(CohortMembership.cohort_id == cohort_id, CohortMembership.user_id == user_id)
        )
        membership = result.scalar_one_or_none()
        return CohortMembershipResponse.model_validate(membership) if membership else None

    async def list_for_cohort(self, db: AsyncSession, cohort_id: CohortId) -> list[CohortMembershipResponse]:
        result = await db.execute(select(CohortMembership).where(CohortMembership.cohort_id == cohort_id))
        return [CohortMembershipResponse.model_validate(row) for row in result.scalars().all()]

    async def insert_if_absent(
        self,
        db: AsyncSession,
        *,
        cohort_id: CohortId,
        user_id: ProfileId,
        role: MembershipRole = MembershipRole.PARTICIPANT,
    ) -> CohortMembershipResponse | None:
        """Add the user to the cohort.
        Returns the created membership, or None if the user was already a member.
        Integrity failures other than the (cohort, user) uniqueness are re-raised.
        """
        membership = CohortMembership(cohort_id=cohort_id, user_id=user_id, role=role)
        try:
            db.add(membership)
            await db.commit()
            await db.refresh(membership)
            return CohortMembershipResponse.model_validate(membership)
        except IntegrityError:
            await db.rollback()
            if await self.get(db, cohort_id=cohort_id, user_id=user_id) is None:
                raise
            logger.info("User already in cohort, skipping membership", cohort_id=cohort_id, user_id=user_id)
            return None
