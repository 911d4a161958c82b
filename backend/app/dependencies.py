import secrets
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.service_container import Services
from app.services.charge_planner import ScheduledChargePlanner
from app.services.checkout_service import CheckoutSessionBuilder
from app.services.enrollment_reconciler import EnrollmentReconciler
from app.services.notification_dispatcher import NotificationDispatcher
from app.services.payment_gateway import PaymentGateway
from app.services.paywall_admin_service import PaywallAdminService
from app.services.paywall_store import PaywallStore
from app.services.webhook_service import WebhookEventHandler
from common.core.app_error import Errors
from common.core.config_service import ConfigService
from common.core.request_context import RequestContext
from common.utils.utils import get_logger

logger = get_logger()

# Security scheme
optional_security = HTTPBearer(auto_error=False)


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_request_context() -> RequestContext:
    return RequestContext.get()


def get_config_service(services: Annotated[Services, Depends(get_services)]) -> ConfigService:
    return services.config_service


async def get_db(services: Annotated[Services, Depends(get_services)]) -> AsyncGenerator[AsyncSession]:
    """Dependency for async database session."""
    if services.db is None:
        raise Errors.Config.DATABASE_NOT_CONFIGURED.create()
    async with services.db.new_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def get_payment_gateway(services: Annotated[Services, Depends(get_services)]) -> PaymentGateway:
    """Dependency for the Stripe gateway. Answers 500 when Stripe is not configured."""
    if services.payment_gateway is None:
        raise Errors.Config.STRIPE_NOT_CONFIGURED.create()
    return services.payment_gateway


def get_paywall_store(services: Annotated[Services, Depends(get_services)]) -> PaywallStore:
    """Dependency for PaywallStore instance."""
    return PaywallStore(services.paywall_dao, services.course_dao)


def get_paywall_admin_service(services: Annotated[Services, Depends(get_services)]) -> PaywallAdminService:
    """Dependency for PaywallAdminService instance."""
    return PaywallAdminService(services.paywall_dao)


def get_checkout_builder(
    services: Annotated[Services, Depends(get_services)],
    gateway: Annotated[PaymentGateway, Depends(get_payment_gateway)],
    paywall_store: Annotated[PaywallStore, Depends(get_paywall_store)],
) -> CheckoutSessionBuilder:
    """Dependency for CheckoutSessionBuilder instance."""
    return CheckoutSessionBuilder(paywall_store, gateway, site_url=services.config_service.site.url)


def get_notification_dispatcher(services: Annotated[Services, Depends(get_services)]) -> NotificationDispatcher:
    """Dependency for NotificationDispatcher instance."""
    config = services.config_service
    return NotificationDispatcher(
        services.mail_sender,
        services.email_log_dao,
        services.course_dao,
        login_url=config.site.login_url,
        default_test_recipient=config.gmail.sender_email,
    )


def get_webhook_handler(
    services: Annotated[Services, Depends(get_services)],
    gateway: Annotated[PaymentGateway, Depends(get_payment_gateway)],
    paywall_store: Annotated[PaywallStore, Depends(get_paywall_store)],
    dispatcher: Annotated[NotificationDispatcher, Depends(get_notification_dispatcher)],
) -> WebhookEventHandler:
    """Dependency for WebhookEventHandler instance."""
    reconciler = EnrollmentReconciler(
        services.payment_dao,
        services.profile_dao,
        services.cohort_membership_dao,
        services.pending_enrollment_dao,
    )
    planner = ScheduledChargePlanner(services.scheduled_charge_dao)
    return WebhookEventHandler(gateway, reconciler, planner, dispatcher, paywall_store)


def require_admin(
    config_service: Annotated[ConfigService, Depends(get_config_service)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_security)],
) -> None:
    """Guard for the paywall admin API: a static bearer token from ADMIN_API_TOKEN."""
    expected = config_service.admin.api_token
    if not expected:
        raise Errors.Config.ADMIN_NOT_CONFIGURED.create()
    if credentials is None or not secrets.compare_digest(credentials.credentials.encode(), expected.encode()):
        logger.warning("Rejected admin request with missing or invalid token")
        raise Errors.Generic.UNAUTHORIZED.create()
