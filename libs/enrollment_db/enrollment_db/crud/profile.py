from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from enrollment_db.models.profile import Profile
from enrollment_db.schemas.profile import ProfileCreate, ProfileResponse


class ProfileDAO:
    async def get_by_email(self, db: AsyncSession, email: str) -> ProfileResponse | None:
        """Case-insensitive lookup; checkout emails are typed by the buyer."""
        result = await db.execute(select(Profile).where(func.lower(Profile.email) == email.strip().lower()))
        profile = result.scalars().first()
        return ProfileResponse.model_validate(profile) if profile else None

    async def create(self, db: AsyncSession, *, obj_in: ProfileCreate) -> ProfileResponse:
        profile = Profile(**obj_in.model_dump())
        db.add(profile)
        await db.commit()
        await db.refresh(profile)
        return ProfileResponse.model_validate(profile)
