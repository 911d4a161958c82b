"""Typed views over the Stripe webhook payloads we act on."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.checkout import CheckoutMetadata
from common.utils.json_model import JsonModel


class StripeEventType(StrEnum):
    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


class CustomerDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    name: str | None = None


class CheckoutSessionObject(BaseModel):
    """`data.object` of a `checkout.session.completed` event."""

    model_config = ConfigDict(extra="ignore")

    id: str
    customer: str | None = None
    payment_intent: str | None = None
    customer_email: str | None = None
    customer_details: CustomerDetails | None = None
    amount_total: int | None = None
    currency: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)

    @property
    def buyer_email(self) -> str | None:
        details_email = self.customer_details.email if self.customer_details else None
        return details_email or self.customer_email or None

    @property
    def buyer_name(self) -> str:
        return (self.customer_details.name if self.customer_details else None) or ""

    @property
    def checkout_metadata(self) -> CheckoutMetadata:
        return CheckoutMetadata.from_stripe(self.metadata)


class StripeEventData(BaseModel):
    object: dict[str, Any]


class StripeEvent(BaseModel):
    """Envelope shared by every event type. `data.object` stays untyped until dispatch."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    type: str
    data: StripeEventData

    def checkout_session(self) -> CheckoutSessionObject:
        return CheckoutSessionObject.model_validate(self.data.object)


class WebhookResponse(JsonModel):
    received: bool = True
