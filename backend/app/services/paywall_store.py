"""Read-only paywall lookups used by checkout, webhook and page rendering."""

from __future__ import annotations

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from common.core.app_error import Errors
from common.ids import PaywallId
from enrollment_db.crud.course import CourseDAO
from enrollment_db.crud.paywall import PaywallDAO
from enrollment_db.schemas.course import CohortResponse, CourseResponse
from enrollment_db.schemas.paywall import PaywallResponse


class PaywallContext(BaseModel):
    """A paywall together with the course and cohort it sells."""

    paywall: PaywallResponse
    course: CourseResponse | None = None
    cohort: CohortResponse | None = None

    @property
    def course_name(self) -> str:
        return self.course.title if self.course else self.paywall.name


class PaywallStore:
    def __init__(self, paywall_dao: PaywallDAO, course_dao: CourseDAO) -> None:
        self.paywall_dao = paywall_dao
        self.course_dao = course_dao

    async def get(self, db: AsyncSession, paywall_id: PaywallId) -> PaywallResponse | None:
        return await self.paywall_dao.get(db, paywall_id)

    async def get_active(self, db: AsyncSession, paywall_id: PaywallId) -> PaywallResponse:
        paywall = await self.paywall_dao.get_active(db, paywall_id)
        if not paywall:
            raise Errors.Paywall.NOT_FOUND.create(details={"paywall_id": str(paywall_id)})
        return paywall

    async def get_active_by_slug(self, db: AsyncSession, slug: str) -> PaywallResponse:
        paywall = await self.paywall_dao.get_active_by_slug(db, slug)
        if not paywall:
            raise Errors.Paywall.NOT_FOUND.create(details={"slug": slug})
        return paywall

    async def get_context(self, db: AsyncSession, paywall: PaywallResponse) -> PaywallContext:
        course = await self.course_dao.get(db, paywall.course_id) if paywall.course_id else None
        cohort = await self.course_dao.get_cohort(db, paywall.cohort_id) if paywall.cohort_id else None
        return PaywallContext(paywall=paywall, course=course, cohort=cohort)
