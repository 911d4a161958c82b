from __future__ import annotations

from contextvars import ContextVar
from uuid import uuid4

from pydantic import Field

from common.ids import PaywallId, RequestId
from common.utils import ContextVarManager, JsonModel, use_context_var


class RequestContext(JsonModel):
    """Per-request identifiers attached to every log line emitted while handling the request.

    The checkout flow fills in `paywall_id`; the webhook flow fills in
    `stripe_session_id` once the event has been authenticated.
    """

    request_id: RequestId = Field(default_factory=lambda: RequestId(uuid4()))
    endpoint: str | None = None

    paywall_id: PaywallId | None = None
    stripe_session_id: str | None = None

    @staticmethod
    def get() -> RequestContext:
        return _context_var.get()

    @staticmethod
    def get_or_none() -> RequestContext | None:
        return _context_var.get(None)

    @staticmethod
    def context() -> ContextVarManager[RequestContext]:
        return use_context_var(_context_var, RequestContext())


_context_var: ContextVar[RequestContext] = ContextVar("request_context")
