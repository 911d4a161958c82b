"""Checkout and Stripe webhook routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_checkout_builder, get_db, get_webhook_handler
from app.schemas.checkout import CheckoutRequest, CheckoutResponse
from app.schemas.stripe_events import WebhookResponse
from app.services.checkout_service import CheckoutSessionBuilder
from app.services.webhook_service import WebhookEventHandler
from common.utils.utils import get_logger

checkout_router = APIRouter()
logger = get_logger()


@checkout_router.post("/checkout")
async def create_checkout(
    req: CheckoutRequest,
    builder: Annotated[CheckoutSessionBuilder, Depends(get_checkout_builder)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CheckoutResponse:
    """Create a Stripe Checkout Session for a paywall and return its redirect URL."""
    result = await builder.create_session(db, req)
    return CheckoutResponse(session_id=result.id, url=result.url)


@checkout_router.post("/webhook/stripe")
async def stripe_webhook(
    request: Request,
    handler: Annotated[WebhookEventHandler, Depends(get_webhook_handler)],
    db: Annotated[AsyncSession, Depends(get_db)],
    stripe_signature: Annotated[str | None, Header(alias="Stripe-Signature")] = None,
) -> WebhookResponse:
    # The signature covers the exact bytes Stripe sent
    payload = await request.body()
    result = await handler.handle(db, payload, stripe_signature)
    if result.failed_steps:
        logger.warning("Webhook acknowledged with failed steps", event_type=result.event_type, failed_steps=result.failed_steps)
    return WebhookResponse(received=True)
