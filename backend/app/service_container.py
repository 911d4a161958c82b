from __future__ import annotations

from typing import override

from app.services.mail_sender import GmailSender
from app.services.payment_gateway import PaymentGateway
from common.core.config_service import ConfigService
from common.core.lifecycle import Lifecycle
from common.db.db import Db, DBConfig
from common.utils.utils import get_logger
from enrollment_db.crud.course import CohortMembershipDAO, CourseDAO
from enrollment_db.crud.email_log import EmailLogDAO
from enrollment_db.crud.enrollment import PendingEnrollmentDAO
from enrollment_db.crud.payments import PaymentDAO, ScheduledChargeDAO
from enrollment_db.crud.paywall import PaywallDAO
from enrollment_db.crud.profile import ProfileDAO
from enrollment_db.db.init_db import init_db

logger = get_logger()


class Services(Lifecycle):
    """Long-lived collaborators shared by every request.

    Built once per application and stored on ``app.state.services``. Optional
    clients are None when their configuration is missing; the endpoints that
    need them answer 500 "not configured" instead.
    """

    config_service: ConfigService

    db: Db | None
    payment_gateway: PaymentGateway | None
    mail_sender: GmailSender

    course_dao: CourseDAO
    cohort_membership_dao: CohortMembershipDAO
    profile_dao: ProfileDAO
    paywall_dao: PaywallDAO
    payment_dao: PaymentDAO
    scheduled_charge_dao: ScheduledChargeDAO
    pending_enrollment_dao: PendingEnrollmentDAO
    email_log_dao: EmailLogDAO

    def __init__(self, config_service: ConfigService | None = None, create_tables: bool = True) -> None:
        super().__init__()
        self._create_tables = create_tables

        # Initialize core infrastructure
        self.config_service = config_service or self._create_config_service()
        self.db = self._create_db(config_service=self.config_service)
        self.payment_gateway = self._create_payment_gateway(config_service=self.config_service)
        self.mail_sender = self._create_mail_sender(config_service=self.config_service)

        # Initialize database access objects
        self.course_dao = CourseDAO()
        self.cohort_membership_dao = CohortMembershipDAO()
        self.profile_dao = ProfileDAO()
        self.paywall_dao = PaywallDAO()
        self.payment_dao = PaymentDAO()
        self.scheduled_charge_dao = ScheduledChargeDAO()
        self.pending_enrollment_dao = PendingEnrollmentDAO()
        self.email_log_dao = EmailLogDAO()

    @override
    async def _start(self) -> None:
        if self.db is not None:
            await self.db.start()
            if self._create_tables and not await init_db(self.db):
                raise RuntimeError("Failed to initialize database")
        await self.mail_sender.start()

    @override
    async def _stop(self) -> None:
        await self.mail_sender.stop()
        if self.db is not None:
            await self.db.stop()

    # Protected creation methods for dependency injection/overriding
    def _create_config_service(self) -> ConfigService:
        return ConfigService()

    def _create_db(self, config_service: ConfigService) -> Db | None:
        database = config_service.database
        if not database.url:
            logger.warning("DATABASE_URL is not set; database-backed endpoints are disabled")
            return None
        return Db(
            DBConfig(
                url=database.url,
                echo=database.echo,
                pool_size=database.pool_size,
                pool_max_overflow=database.max_overflow,
            )
        )

    def _create_payment_gateway(self, config_service: ConfigService) -> PaymentGateway | None:
        return PaymentGateway.from_config(config_service.stripe)

    def _create_mail_sender(self, config_service: ConfigService) -> GmailSender:
        if not config_service.gmail.is_configured:
            logger.warning("Gmail credentials are incomplete; emails will not be sent")
        return GmailSender(config_service.gmail)
