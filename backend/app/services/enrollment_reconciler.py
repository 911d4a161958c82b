"""Enrollment Reconciler: records a completed payment and grants course access.

The Stripe session id is the idempotency key. A session that already has a
Payment row is reported as ALREADY_PROCESSED and nothing else is written.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.checkout import CheckoutMetadata
from app.schemas.stripe_events import CheckoutSessionObject
from common.core.app_error import Errors
from common.utils.utils import get_logger
from enrollment_db.crud.course import CohortMembershipDAO
from enrollment_db.crud.enrollment import PendingEnrollmentDAO
from enrollment_db.crud.payments import PaymentDAO
from enrollment_db.crud.profile import ProfileDAO
from enrollment_db.models.course import MembershipRole
from enrollment_db.schemas.enrollment import PendingEnrollmentCreate
from enrollment_db.schemas.payments import PaymentCreate, PaymentResponse
from enrollment_db.schemas.profile import ProfileResponse

logger = get_logger()


class PaymentRecordStatus(StrEnum):
    RECORDED = "recorded"
    ALREADY_PROCESSED = "already_processed"


class EnrollmentAction(StrEnum):
    MEMBERSHIP_CREATED = "membership_created"
    ALREADY_MEMBER = "already_member"
    PENDING_CREATED = "pending_created"
    PAYMENT_ONLY = "payment_only"
    FAILED = "failed"
    NONE = "none"


class ReconciliationOutcome(BaseModel):
    payment_status: PaymentRecordStatus
    enrollment: EnrollmentAction = EnrollmentAction.NONE
    payment: PaymentResponse | None = None
    profile: ProfileResponse | None = None

    @property
    def is_new_payment(self) -> bool:
        return self.payment_status == PaymentRecordStatus.RECORDED


def decode_checkout_metadata(session: CheckoutSessionObject) -> CheckoutMetadata:
    """Typed metadata of a completed session, or empty metadata if it cannot be read.

    The raw values are still stored with the payment as its metadata snapshot.
    """
    try:
        return session.checkout_metadata
    except ValidationError as e:
        logger.warning("Unreadable checkout metadata, recording payment without it", session_id=session.id, error=str(e))
        return CheckoutMetadata()


class EnrollmentReconciler:
    def __init__(
        self,
        payment_dao: PaymentDAO,
        profile_dao: ProfileDAO,
        membership_dao: CohortMembershipDAO,
        pending_dao: PendingEnrollmentDAO,
    ) -> None:
        self.payment_dao = payment_dao
        self.profile_dao = profile_dao
        self.membership_dao = membership_dao
        self.pending_dao = pending_dao

    async def reconcile(
        self, db: AsyncSession, session: CheckoutSessionObject, metadata: CheckoutMetadata | None = None
    ) -> ReconciliationOutcome:
        """Record the payment, then enroll the buyer or queue a pending enrollment.

        Args:
            db: Database session
            session: The completed checkout session
            metadata: Already decoded session metadata; decoded here when omitted

        Raises:
            AppException: Errors.Webhook.PAYMENT_NOT_RECORDED when the payment
                row cannot be written. Enrollment failures never raise.
        """
        if metadata is None:
            metadata = decode_checkout_metadata(session)

        payment = await self.record_payment(db, session, metadata)
        if payment is None:
            logger.info("Checkout session already processed", session_id=session.id)
            return ReconciliationOutcome(payment_status=PaymentRecordStatus.ALREADY_PROCESSED)

        # Enroll against the references that were actually stored
        metadata = metadata.model_copy(
            update={"paywall_id": payment.paywall_id, "course_id": payment.course_id, "cohort_id": payment.cohort_id}
        )

        email = session.buyer_email
        if not email:
            logger.warning("Completed checkout has no buyer email", session_id=session.id)
            return ReconciliationOutcome(payment_status=PaymentRecordStatus.RECORDED, payment=payment)

        try:
            profile = await self.profile_dao.get_by_email(db, email)
        except SQLAlchemyError as e:
            logger.exception("Error looking up buyer profile", session_id=session.id, error=str(e))
            await db.rollback()
            return ReconciliationOutcome(payment_status=PaymentRecordStatus.RECORDED, enrollment=EnrollmentAction.FAILED, payment=payment)

        if profile is None:
            action = await self._create_pending(db, session, metadata, email)
        elif metadata.course_id and metadata.cohort_id:
            action = await self._add_membership(db, metadata, profile)
        else:
            # Course without a cohort, or a payment that is not tied to a course
            action = EnrollmentAction.PAYMENT_ONLY

        logger.info("Enrollment reconciled", session_id=session.id, enrollment=action, profile_found=profile is not None)
        return ReconciliationOutcome(
            payment_status=PaymentRecordStatus.RECORDED,
            enrollment=action,
            payment=payment,
            profile=profile,
        )

    async def record_payment(
        self, db: AsyncSession, session: CheckoutSessionObject, metadata: CheckoutMetadata
    ) -> PaymentResponse | None:
        """Insert the Payment row. Returns None if the session was already recorded.

        References to a paywall, course or cohort deleted since checkout are
        dropped from the row; the original ids stay in `metadata_snapshot`.
        """
        obj_in = PaymentCreate(
            stripe_session_id=session.id,
            stripe_customer_id=session.customer,
            stripe_payment_intent_id=session.payment_intent,
            paywall_id=metadata.paywall_id,
            course_id=metadata.course_id,
            cohort_id=metadata.cohort_id,
            customer_email=session.buyer_email,
            customer_name=session.buyer_name or None,
            amount_total=Decimal(session.amount_total or 0) / 100,
            currency=session.currency or "usd",
            metadata_snapshot=dict(session.metadata),
        )
        try:
            if await self.payment_dao.get_by_session_id(db, stripe_session_id=session.id):
                return None

            try:
                payment = await self.payment_dao.insert_if_absent(db, obj_in=obj_in)
            except IntegrityError:
                missing = await self.payment_dao.missing_links(db, obj_in)
                if not missing:
                    raise
                logger.warning(
                    "Checkout references deleted catalogue rows, recording payment without them",
                    session_id=session.id,
                    missing=missing,
                )
                payment = await self.payment_dao.insert_if_absent(db, obj_in=obj_in.model_copy(update=dict.fromkeys(missing)))
        except SQLAlchemyError as e:
            logger.exception("Error recording payment", session_id=session.id, error=str(e))
            await db.rollback()
            raise Errors.Webhook.PAYMENT_NOT_RECORDED.create(details={"session_id": session.id}, cause=e) from e

        if payment:
            logger.info("Payment recorded", session_id=session.id, amount_total=payment.amount_total, currency=payment.currency)
        return payment

    async def _add_membership(self, db: AsyncSession, metadata: CheckoutMetadata, profile: ProfileResponse) -> EnrollmentAction:
        assert metadata.cohort_id is not None
        try:
            if await self.membership_dao.get(db, cohort_id=metadata.cohort_id, user_id=profile.id):
                return EnrollmentAction.ALREADY_MEMBER

            membership = await self.membership_dao.insert_if_absent(
                db, cohort_id=metadata.cohort_id, user_id=profile.id, role=MembershipRole.PARTICIPANT
            )
        except SQLAlchemyError as e:
            logger.exception("Error adding cohort membership", cohort_id=metadata.cohort_id, user_id=profile.id, error=str(e))
            await db.rollback()
            return EnrollmentAction.FAILED

        if membership is None:
            return EnrollmentAction.ALREADY_MEMBER
        logger.info("User added to cohort", cohort_id=metadata.cohort_id, user_id=profile.id)
        return EnrollmentAction.MEMBERSHIP_CREATED

    async def _create_pending(
        self, db: AsyncSession, session: CheckoutSessionObject, metadata: CheckoutMetadata, email: str
    ) -> EnrollmentAction:
        try:
            _ = await self.pending_dao.create(
                db,
                obj_in=PendingEnrollmentCreate(
                    email=email,
                    name=session.buyer_name or None,
                    paywall_id=metadata.paywall_id,
                    course_id=metadata.course_id,
                    cohort_id=metadata.cohort_id,
                    stripe_session_id=session.id,
                ),
            )
        except SQLAlchemyError as e:
            logger.exception("Error creating pending enrollment", email=email, session_id=session.id, error=str(e))
            await db.rollback()
            return EnrollmentAction.FAILED

        logger.info("Pending enrollment created", email=email, session_id=session.id)
        return EnrollmentAction.PENDING_CREATED
