"""PaymentGateway encapsulates all Stripe interactions.

One instance is built from configuration at startup and injected where needed;
there is no module-level API key.
"""

from __future__ import annotations

import asyncio
from typing import Any

import stripe
from pydantic import ValidationError

from app.schemas.checkout import CheckoutSessionParams, CheckoutSessionResult
from app.schemas.stripe_events import StripeEvent
from common.core.app_error import Errors
from common.core.config_service import StripeSection
from common.utils.msgspec import SerializationError, decode_json
from common.utils.utils import get_logger

logger = get_logger()


class PaymentGateway:
    def __init__(self, client: stripe.StripeClient, webhook_secret: str = "") -> None:
        self._client = client
        self.webhook_secret = webhook_secret

    @classmethod
    def from_config(cls, config: StripeSection) -> PaymentGateway | None:
        """Build a gateway, or return None when no secret key is configured."""
        if not config.is_configured:
            logger.warning("Stripe secret key is missing; checkout is disabled")
            return None
        if not config.webhook_secret:
            logger.warning("Stripe webhook secret is missing; webhook payloads will not be verified")
        return cls(stripe.StripeClient(config.secret_key), webhook_secret=config.webhook_secret)

    @property
    def verifies_signatures(self) -> bool:
        return bool(self.webhook_secret)

    async def create_checkout_session(self, params: CheckoutSessionParams) -> CheckoutSessionResult:
        logger.info(
            "Creating Stripe Checkout Session",
            paywall_id=params.metadata.get("paywall_id"),
            total_minor_units=params.total_minor_units,
            line_items=len(params.line_items),
        )
        try:
            session = await asyncio.to_thread(self._client.v1.checkout.sessions.create, params.to_stripe())
        except stripe.StripeError as e:
            message = e.user_message or str(e) or "Stripe error"
            logger.exception("Stripe checkout session creation failed", error=message, http_status=e.http_status)
            raise Errors.Checkout.GATEWAY_ERROR.create(message=message, cause=e) from e

        return CheckoutSessionResult(id=session.id, url=session.url)

    def parse_event(self, payload: bytes, signature: str | None) -> StripeEvent:
        """Authenticate and decode a webhook delivery.

        With a webhook secret configured, the ``Stripe-Signature`` header is
        mandatory and checked against the raw body; a delivery without it is
        rejected rather than trusted, which is stricter on purpose than only
        verifying signatures that are present. Without a secret the body is
        trusted as-is.
        """
        if self.webhook_secret:
            if not signature:
                logger.warning("Stripe webhook received without signature")
                raise Errors.Webhook.INVALID_SIGNATURE.create()
            try:
                _ = stripe.WebhookSignature.verify_header(payload.decode("utf-8"), signature, self.webhook_secret)
            except (stripe.SignatureVerificationError, UnicodeDecodeError) as e:
                logger.warning("Stripe webhook signature verification failed", error=str(e))
                raise Errors.Webhook.INVALID_SIGNATURE.create(cause=e) from e
        else:
            logger.warning("Processing unverified Stripe webhook payload")

        return parse_event_payload(payload)


def parse_event_payload(payload: bytes) -> StripeEvent:
    try:
        raw: Any = decode_json(payload)
        return StripeEvent.model_validate(raw)
    except (SerializationError, ValidationError) as e:
        logger.warning("Invalid Stripe webhook payload", error=str(e))
        raise Errors.Webhook.INVALID_PAYLOAD.create(cause=e) from e
