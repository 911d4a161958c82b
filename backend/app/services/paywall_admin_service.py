"""Paywall administration: the write side of the paywall store."""

import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from common.core.app_error import AppException, Errors
from common.ids import PaywallId
from common.utils.utils import get_logger
from enrollment_db.crud.paywall import PaywallDAO
from enrollment_db.schemas.paywall import PaywallCreate, PaywallResponse, PaywallUpdate

logger = get_logger()

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lowercase `value` and collapse every run of other characters into a single dash."""
    return _NON_ALPHANUMERIC.sub("-", value.lower()).strip("-")


class PaywallAdminService:
    """Service layer for paywall management.
    Handles slug derivation and uniqueness on top of PaywallDAO.
    """

    def __init__(self, paywall_dao: PaywallDAO) -> None:
        self.paywall_dao = paywall_dao

    async def list_paywalls(self, db: AsyncSession, *, skip: int = 0, limit: int = 100) -> list[PaywallResponse]:
        return await self.paywall_dao.get_multi(db, skip=skip, limit=limit)

    async def get_paywall(self, db: AsyncSession, paywall_id: PaywallId) -> PaywallResponse:
        paywall = await self.paywall_dao.get(db, paywall_id)
        if not paywall:
            raise Errors.Generic.NOT_FOUND.create(message="Paywall not found", details={"paywall_id": str(paywall_id)})
        return paywall

    async def create_paywall(self, db: AsyncSession, *, paywall_in: PaywallCreate) -> PaywallResponse:
        """Create a paywall.

        Args:
            db: Database session
            paywall_in: Paywall data; the slug is derived from the name when omitted

        Returns:
            Created PaywallResponse

        Raises:
            AppException: Errors.Paywall.INVALID_NAME when no slug can be derived,
                Errors.Paywall.SLUG_TAKEN when the slug is already in use,
                Errors.Paywall.INVALID_REFERENCE when the linked course or cohort does not exist
        """
        slug = slugify(paywall_in.slug or paywall_in.name)
        if not slug:
            raise Errors.Paywall.INVALID_NAME.create()
        await self._ensure_slug_free(db, slug)

        logger.info("Creating paywall", name=paywall_in.name, slug=slug)
        try:
            return await self.paywall_dao.create(db, obj_in=paywall_in, slug=slug)
        except IntegrityError as e:
            raise await self._integrity_error(db, e, slug) from e

    async def update_paywall(self, db: AsyncSession, paywall_id: PaywallId, *, paywall_in: PaywallUpdate) -> PaywallResponse:
        """Apply a partial update. A new slug is normalised the same way as on create."""
        if paywall_in.slug is not None:
            slug = slugify(paywall_in.slug)
            if not slug:
                raise Errors.Paywall.INVALID_NAME.create(message="Slug must contain letters or digits")
            await self._ensure_slug_free(db, slug, exclude_id=paywall_id)
            paywall_in = paywall_in.model_copy(update={"slug": slug})

        logger.info("Updating paywall", paywall_id=paywall_id)
        try:
            updated = await self.paywall_dao.update(db, paywall_id, paywall_in)
        except IntegrityError as e:
            raise await self._integrity_error(db, e, paywall_in.slug, exclude_id=paywall_id) from e
        if updated is None:
            raise Errors.Generic.NOT_FOUND.create(message="Paywall not found", details={"paywall_id": str(paywall_id)})
        return updated

    async def toggle_paywall(self, db: AsyncSession, paywall_id: PaywallId) -> PaywallResponse:
        """Flip the active flag. Deactivation only blocks new checkouts."""
        paywall = await self.get_paywall(db, paywall_id)
        updated = await self.paywall_dao.set_active(db, paywall_id, not paywall.is_active)
        if updated is None:
            raise Errors.Generic.NOT_FOUND.create(message="Paywall not found", details={"paywall_id": str(paywall_id)})
        logger.info("Paywall toggled", paywall_id=paywall_id, is_active=updated.is_active)
        return updated

    async def delete_paywall(self, db: AsyncSession, paywall_id: PaywallId) -> None:
        logger.info("Deleting paywall", paywall_id=paywall_id)
        if not await self.paywall_dao.delete(db, paywall_id):
            raise Errors.Generic.NOT_FOUND.create(message="Paywall not found", details={"paywall_id": str(paywall_id)})

    async def _ensure_slug_free(self, db: AsyncSession, slug: str, exclude_id: PaywallId | None = None) -> None:
        existing = await self.paywall_dao.get_by_slug(db, slug)
        if existing and existing.id != exclude_id:
            raise Errors.Paywall.SLUG_TAKEN.create(details={"slug": slug})

    async def _integrity_error(
        self, db: AsyncSession, error: IntegrityError, slug: str | None, exclude_id: PaywallId | None = None
    ) -> AppException:
        """Map a rejected write to a slug conflict, or else to a dangling course/cohort link."""
        await db.rollback()
        if slug is not None:
            existing = await self.paywall_dao.get_by_slug(db, slug)
            if existing and existing.id != exclude_id:
                return Errors.Paywall.SLUG_TAKEN.create(details={"slug": slug}, cause=error)
        return Errors.Paywall.INVALID_REFERENCE.create(cause=error)
