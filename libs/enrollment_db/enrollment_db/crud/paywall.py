from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from common.ids import PaywallId
from enrollment_db.models.paywall import Paywall
from enrollment_db.schemas.paywall import PaywallCreate, PaywallResponse, PaywallUpdate


class PaywallDAO:
    """Data Access Object for Paywall operations.
    Returns Pydantic objects instead of SQLAlchemy models.
    """

    async def get(self, db: AsyncSession, id: PaywallId) -> PaywallResponse | None:
        paywall = await self._get_row(db, id)
        return PaywallResponse.model_validate(paywall) if paywall else None

    async def get_by_slug(self, db: AsyncSession, slug: str) -> PaywallResponse | None:
        result = await db.execute(select(Paywall).where(Paywall.slug == slug))
        paywall = result.scalar_one_or_none()
        return PaywallResponse.model_validate(paywall) if paywall else None

    async def get_active(self, db: AsyncSession, id: PaywallId) -> PaywallResponse | None:
        result = await db.execute(select(Paywall).where(Paywall.id == id, Paywall.is_active.is_(True)))
        paywall = result.scalar_one_or_none()
        return PaywallResponse.model_validate(paywall) if paywall else None

    async def get_active_by_slug(self, db: AsyncSession, slug: str) -> PaywallResponse | None:
        result = await db.execute(select(Paywall).where(Paywall.slug == slug, Paywall.is_active.is_(True)))
        paywall = result.scalar_one_or_none()
        return PaywallResponse.model_validate(paywall) if paywall else None

    async def get_multi(self, db: AsyncSession, *, skip: int = 0, limit: int = 100) -> list[PaywallResponse]:
        """Newest first."""
        result = await db.execute(select(Paywall).order_by(Paywall.created_at.desc()).offset(skip).limit(limit))
        return [PaywallResponse.model_validate(row) for row in result.scalars().all()]

    async def create(self, db: AsyncSession, *, obj_in: PaywallCreate, slug: str) -> PaywallResponse:
        paywall = Paywall(**obj_in.model_dump(exclude={"slug"}), slug=slug)
        db.add(paywall)
        await db.commit()
        await db.refresh(paywall)
        return PaywallResponse.model_validate(paywall)

    async def update(self, db: AsyncSession, id: PaywallId, obj_in: PaywallUpdate) -> PaywallResponse | None:
        paywall = await self._get_row(db, id)
        if not paywall:
            return None

        for field, value in obj_in.model_dump(exclude_unset=True).items():
            setattr(paywall, field, value)

        await db.commit()
        await db.refresh(paywall)
        return PaywallResponse.model_validate(paywall)

    async def set_active(self, db: AsyncSession, id: PaywallId, is_active: bool) -> PaywallResponse | None:
        return await self.update(db, id, PaywallUpdate(is_active=is_active))

    async def delete(self, db: AsyncSession, id: PaywallId) -> bool:
        paywall = await self._get_row(db, id)
        if not paywall:
            return False

        await db.delete(paywall)
        await db.commit()
        return True

    async def _get_row(self, db: AsyncSession, id: PaywallId) -> Paywall | None:
        result = await db.execute(select(Paywall).where(Paywall.id == id))
        return result.scalar_one_or_none()
