"""Health check schemas."""

from pydantic import Field

from common.utils.json_model import JsonModel


class HealthCheckResponse(JsonModel):
    """Health check response."""

    status: str = Field(..., description="Service health status")
    service: str = Field(..., description="Service name")
    environment: str = Field(..., description="Environment name")
    stripe_configured: bool = Field(..., description="Whether a Stripe secret key is set")
    webhook_secret_configured: bool = Field(..., description="Whether webhook signatures are verified")
    mail_configured: bool = Field(..., description="Whether Gmail credentials are set")
    database_type: str | None = Field(default=None, description="Database backend (sqlite/postgresql), None when not configured")
