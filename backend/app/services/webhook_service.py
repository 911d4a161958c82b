"""Webhook Event Handler for Stripe deliveries.

Recording the payment is the only step allowed to fail the request, so that
Stripe retries it. Everything after that (charge scheduling, emails) is run
best-effort: failures are logged and the delivery is still acknowledged.
"""

from __future__ import annotations

from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.checkout import CheckoutMetadata
from app.schemas.stripe_events import CheckoutSessionObject, StripeEventType
from app.services.charge_planner import ScheduledChargePlanner
from app.services.enrollment_reconciler import EnrollmentReconciler, ReconciliationOutcome, decode_checkout_metadata
from app.services.notification_dispatcher import NotificationDispatcher, NotificationReport
from app.services.payment_gateway import PaymentGateway
from app.services.paywall_store import PaywallContext, PaywallStore
from common.core.app_error import Errors
from common.core.request_context import RequestContext
from common.utils.utils import get_logger, run_best_effort
from enrollment_db.schemas.payments import ScheduledChargeResponse

logger = get_logger()


class WebhookResult(BaseModel):
    event_type: str
    processed: bool = False
    outcome: ReconciliationOutcome | None = None
    scheduled_charge: ScheduledChargeResponse | None = None
    notifications: NotificationReport | None = None
    failed_steps: list[str] = []


class WebhookEventHandler:
    def __init__(
        self,
        gateway: PaymentGateway,
        reconciler: EnrollmentReconciler,
        planner: ScheduledChargePlanner,
        dispatcher: NotificationDispatcher,
        paywall_store: PaywallStore,
    ) -> None:
        self.gateway = gateway
        self.reconciler = reconciler
        self.planner = planner
        self.dispatcher = dispatcher
        self.paywall_store = paywall_store

    async def handle(self, db: AsyncSession, payload: bytes, signature: str | None) -> WebhookResult:
        """Authenticate, decode and act on one webhook delivery.

        Raises:
            AppException: invalid signature or payload (400), or the payment
                could not be recorded (500)
        """
        event = self.gateway.parse_event(payload, signature)

        if event.type != StripeEventType.CHECKOUT_SESSION_COMPLETED:
            logger.info("Ignoring Stripe event", event_type=event.type, event_id=event.id)
            return WebhookResult(event_type=event.type)

        try:
            session = event.checkout_session()
        except ValidationError as e:
            raise Errors.Webhook.INVALID_PAYLOAD.create(message="Invalid checkout session payload", cause=e) from e

        context = RequestContext.get_or_none()
        if context is not None:
            context.stripe_session_id = session.id

        return await self.handle_checkout_completed(db, session)

    async def handle_checkout_completed(self, db: AsyncSession, session: CheckoutSessionObject) -> WebhookResult:
        metadata = decode_checkout_metadata(session)
        email = session.buyer_email
        logger.info("Payment successful", session_id=session.id, email=email, paywall_id=metadata.paywall_id)

        outcome = await self.reconciler.reconcile(db, session, metadata)
        result = WebhookResult(event_type=StripeEventType.CHECKOUT_SESSION_COMPLETED, processed=True, outcome=outcome)
        if not outcome.is_new_payment:
            return result

        loaded = await run_best_effort("paywall_context", lambda: self._load_context(db, metadata), session_id=session.id)
        if not loaded.ok:
            await db.rollback()
            result.failed_steps.append(loaded.name)
        paywall_context = loaded.value

        planned = await run_best_effort(
            "scheduled_charge",
            lambda: self.planner.plan(db, session, metadata, paywall_context.cohort if paywall_context else None),
            session_id=session.id,
        )
        if planned.ok:
            result.scheduled_charge = planned.value
        else:
            await db.rollback()
            result.failed_steps.append(planned.name)

        if email and paywall_context:
            notified = await run_best_effort(
                "notifications",
                lambda: self.dispatcher.send_payment_notifications(
                    db, email=email, name=session.buyer_name or None, context=paywall_context
                ),
                session_id=session.id,
            )
            if notified.ok:
                result.notifications = notified.value
            else:
                await db.rollback()
                result.failed_steps.append(notified.name)

        return result

    async def _load_context(self, db: AsyncSession, metadata: CheckoutMetadata) -> PaywallContext | None:
        # Inactive paywalls still count: the buyer already paid
        if metadata.paywall_id is None:
            return None
        paywall = await self.paywall_store.get(db, metadata.paywall_id)
        if paywall is None:
            logger.warning("Paywall from checkout metadata not found", paywall_id=metadata.paywall_id)
            return None
        return await self.paywall_store.get_context(db, paywall)
