# backend/app/routers/__init__.py


from typing import Annotated

from fastapi import APIRouter, Depends

from app.dependencies import get_services
from app.schemas.health import HealthCheckResponse
from app.service_container import Services
from common.utils.utils import get_logger

from .checkout import checkout_router
from .email import email_router
from .pages import pages_router
from .paywalls import paywalls_router

logger = get_logger(__name__)

router = APIRouter()


# Health check endpoint
@router.get("/api/health")
async def health_check(services: Annotated[Services, Depends(get_services)]) -> HealthCheckResponse:
    """Health check endpoint for monitoring and testing"""
    config_service = services.config_service
    database_url = config_service.database.url
    return HealthCheckResponse(
        status="healthy",
        service="enrollment",
        environment=config_service.get_environment(),
        stripe_configured=services.payment_gateway is not None,
        webhook_secret_configured=bool(services.payment_gateway and services.payment_gateway.verifies_signatures),
        mail_configured=services.mail_sender.is_configured,
        database_type=("sqlite" if database_url.startswith("sqlite") else "postgresql") if database_url else None,
    )


# Include route definitions
router.include_router(checkout_router, prefix="/api", tags=["checkout"])
router.include_router(email_router, prefix="/api", tags=["email"])
router.include_router(paywalls_router, prefix="/api", tags=["paywalls"])
router.include_router(pages_router, tags=["pages"])
