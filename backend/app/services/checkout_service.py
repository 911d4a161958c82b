"""Checkout Session Builder: turns a paywall offer into a Stripe Checkout Session."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.checkout import (
    CheckoutMetadata,
    CheckoutRequest,
    CheckoutSessionParams,
    CheckoutSessionResult,
    LineItem,
    PaymentIntentData,
    PriceData,
    ProductData,
    SetupFutureUsage,
)
from app.services.payment_gateway import PaymentGateway
from app.services.paywall_store import PaywallContext, PaywallStore
from common.core.app_error import Errors
from common.core.request_context import RequestContext
from common.utils.utils import get_logger

logger = get_logger()

DEFAULT_PRODUCT_DESCRIPTION = "Course enrollment"
EQUIPMENT_DEPOSIT_NAME = "Equipment Deposit"
EQUIPMENT_DEPOSIT_DESCRIPTION = "Refundable equipment deposit"


def to_minor_units(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class CheckoutSessionBuilder:
    def __init__(self, paywall_store: PaywallStore, gateway: PaymentGateway, site_url: str) -> None:
        self.paywall_store = paywall_store
        self.gateway = gateway
        self.site_url = site_url.rstrip("/")

    def build_params(self, context: PaywallContext, customer_email: str | None = None) -> CheckoutSessionParams:
        """Compose line items, redirect URLs and metadata for a paywall.

        The deposit is charged now only when auto-charge is off. With auto-charge
        on, the card is kept for an off-session charge before the cohort starts.
        """
        paywall = context.paywall

        line_items = [
            LineItem(
                price_data=PriceData(
                    product_data=ProductData(
                        name=context.course_name,
                        description=paywall.description or DEFAULT_PRODUCT_DESCRIPTION,
                    ),
                    unit_amount=to_minor_units(paywall.price),
                )
            )
        ]
        if paywall.collects_deposit_at_checkout:
            line_items.append(
                LineItem(
                    price_data=PriceData(
                        product_data=ProductData(name=EQUIPMENT_DEPOSIT_NAME, description=EQUIPMENT_DEPOSIT_DESCRIPTION),
                        unit_amount=to_minor_units(paywall.equipment_deposit),
                    )
                )
            )

        metadata = CheckoutMetadata(
            paywall_id=paywall.id,
            course_id=paywall.course_id,
            cohort_id=paywall.cohort_id,
            equipment_deposit=paywall.equipment_deposit,
            equipment_auto_charge=paywall.equipment_auto_charge,
            equipment_charge_days_before=paywall.equipment_charge_days_before,
        )

        return CheckoutSessionParams(
            line_items=line_items,
            # Stripe substitutes {CHECKOUT_SESSION_ID} itself
            success_url=f"{self.site_url}/checkout/success?session_id={{CHECKOUT_SESSION_ID}}&paywall_id={paywall.id}",
            cancel_url=f"{self.site_url}/checkout/{paywall.slug}?canceled=true",
            metadata=metadata.to_stripe(),
            customer_email=customer_email or None,
            payment_intent_data=(
                PaymentIntentData(setup_future_usage=SetupFutureUsage.OFF_SESSION) if paywall.schedules_deposit_charge else None
            ),
        )

    async def create_session(self, db: AsyncSession, request: CheckoutRequest) -> CheckoutSessionResult:
        if request.paywall_id is None:
            raise Errors.Generic.MISSING_FIELD.create(message="Missing paywall_id")

        request_context = RequestContext.get_or_none()
        if request_context is not None:
            request_context.paywall_id = request.paywall_id

        paywall = await self.paywall_store.get_active(db, request.paywall_id)
        context = await self.paywall_store.get_context(db, paywall)
        params = self.build_params(context, customer_email=request.customer_email)

        result = await self.gateway.create_checkout_session(params)
        logger.info("Checkout session created", paywall_id=paywall.id, session_id=result.id)
        return result
