"""Notification Dispatcher: composes, sends and logs transactional emails.

Sending never raises and every attempt is written to the email log on a
best-effort basis, so a missing or broken log table cannot fail the caller.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.email import EmailResult, SendEmailRequest, TestEmailRequest
from app.services.mail_sender import GmailSender
from app.services.paywall_store import PaywallContext
from common.core.app_error import Errors
from common.utils.template_substitution import MergeData, apply_merge_tags
from common.utils.utils import BestEffortResult, get_logger, run_best_effort
from enrollment_db.crud.course import CourseDAO
from enrollment_db.crud.email_log import EmailLogDAO
from enrollment_db.models.email_log import EmailSourceType, EmailStatus, EmailType
from enrollment_db.schemas.email_log import EmailLogCreate, EmailLogResponse

logger = get_logger()

TEAM_SIGNATURE = "Warm regards,\nThe Neuro Progeny Team"
TEST_EMAIL_SUBJECT = "Test Email from Neuro Progeny University"
TEST_EMAIL_BODY = "This is a test email. If you received this, Gmail API is working!"


def format_start_date(value: date | None) -> str:
    """Render a cohort start date as e.g. "March 15, 2026"."""
    if value is None:
        return "TBD"
    return f"{value:%B} {value.day}, {value.year}"


def default_confirmation_subject(course_name: str) -> str:
    return f"Welcome to {course_name}!"


def default_confirmation_body(name: str | None, course_name: str) -> str:
    return (
        f"Hi {name or 'there'},\n\n"
        f"Thank you for enrolling in {course_name}! We're excited to have you.\n\n"
        "You'll receive access details and next steps shortly.\n\n"
        f"{TEAM_SIGNATURE}"
    )


def default_course_welcome_body(name: str | None, course_title: str) -> str:
    # {{login_url}} is left as a tag and filled in by the merge step
    return (
        f"Hi {name or 'there'},\n\n"
        f"Welcome to {course_title}! You now have full access to the course.\n\n"
        "Sign in at {{login_url}} to get started.\n\n"
        "Warm regards,\nNeuro Progeny Team"
    )


class SentEmail(BaseModel):
    email_type: EmailType
    to: str
    subject: str
    sent: bool


class NotificationReport(BaseModel):
    emails: list[SentEmail] = []

    @property
    def all_sent(self) -> bool:
        return all(email.sent for email in self.emails)


class NotificationDispatcher:
    def __init__(
        self,
        mail_sender: GmailSender,
        email_log_dao: EmailLogDAO,
        course_dao: CourseDAO,
        login_url: str,
        default_test_recipient: str = "",
    ) -> None:
        self.mail_sender = mail_sender
        self.email_log_dao = email_log_dao
        self.course_dao = course_dao
        self.login_url = login_url
        self.default_test_recipient = default_test_recipient

    def merge_data(self, context: PaywallContext, email: str, name: str | None) -> MergeData:
        cohort = context.cohort
        return MergeData(
            name=name or None,
            email=email,
            course_name=context.course_name,
            cohort_name=cohort.name if cohort else None,
            start_date=format_start_date(cohort.start_date) if cohort and cohort.start_date else None,
            login_url=self.login_url,
        )

    async def send_payment_notifications(
        self, db: AsyncSession, *, email: str, name: str | None, context: PaywallContext
    ) -> NotificationReport:
        """Send the payment confirmation and, when configured, the paywall welcome email."""
        paywall = context.paywall
        data = self.merge_data(context, email, name)
        report = NotificationReport()

        subject = (
            apply_merge_tags(paywall.confirmation_email_subject, data, self.login_url)
            if paywall.confirmation_email_subject
            else default_confirmation_subject(context.course_name)
        )
        body = (
            apply_merge_tags(paywall.confirmation_email_body, data, self.login_url)
            if paywall.confirmation_email_body
            else default_confirmation_body(name, context.course_name)
        )
        report.emails.append(
            await self._send_and_log(
                db,
                email_type=EmailType.PAYMENT_CONFIRMATION,
                to=email,
                name=name,
                subject=subject,
                body=body,
                source_type=EmailSourceType.PAYWALL,
                source_id=paywall.id,
            )
        )

        if paywall.welcome_email_subject and paywall.welcome_email_body:
            report.emails.append(
                await self._send_and_log(
                    db,
                    email_type=EmailType.PAYWALL_WELCOME,
                    to=email,
                    name=name,
                    subject=apply_merge_tags(paywall.welcome_email_subject, data, self.login_url),
                    body=apply_merge_tags(paywall.welcome_email_body, data, self.login_url),
                    source_type=EmailSourceType.PAYWALL,
                    source_id=paywall.id,
                )
            )

        return report

    async def send_course_welcome(self, db: AsyncSession, request: SendEmailRequest) -> EmailResult:
        """Handle ``POST /api/send-email``. Only ``course_welcome`` is supported."""
        if not request.type or not request.email:
            raise Errors.Generic.MISSING_FIELD.create(message="Missing type or email")
        if request.type != EmailType.COURSE_WELCOME or request.course_id is None:
            raise Errors.Email.INVALID_TYPE.create(details={"type": request.type})

        course = await self.course_dao.get(db, request.course_id)
        if course is None:
            raise Errors.Email.COURSE_NOT_FOUND.create(details={"course_id": str(request.course_id)})

        data = MergeData(name=request.name, email=request.email, course_name=course.title, login_url=self.login_url)
        if request.cohort_id:
            cohort = await self.course_dao.get_cohort(db, request.cohort_id)
            if cohort:
                data.cohort_name = cohort.name
                data.start_date = format_start_date(cohort.start_date)

        subject = (
            apply_merge_tags(course.welcome_email_subject, data, self.login_url)
            if course.welcome_email_subject
            else default_confirmation_subject(course.title)
        )
        body = apply_merge_tags(
            course.welcome_email_body or default_course_welcome_body(request.name, course.title), data, self.login_url
        )

        result = await self._send_and_log(
            db,
            email_type=EmailType.COURSE_WELCOME,
            to=request.email,
            name=request.name,
            subject=subject,
            body=body,
            source_type=EmailSourceType.COURSE,
            source_id=course.id,
        )
        return EmailResult(success=result.sent, message=f"Email sent to {request.email}" if result.sent else "Failed to send")

    async def send_test(self, request: TestEmailRequest) -> EmailResult:
        """Handle ``POST /api/test-email``. Not logged."""
        recipient = request.to or self.default_test_recipient
        if not recipient:
            raise Errors.Generic.MISSING_FIELD.create(message="Missing recipient")

        sent = await self.mail_sender.send(
            to=recipient,
            subject=request.subject or TEST_EMAIL_SUBJECT,
            body=request.custom_body or request.body or TEST_EMAIL_BODY,
        )
        if not sent:
            raise Errors.Email.SEND_FAILED.create()
        return EmailResult(success=True, message=f"Email sent to {recipient}")

    async def _send_and_log(
        self,
        db: AsyncSession,
        *,
        email_type: EmailType,
        to: str,
        name: str | None,
        subject: str,
        body: str,
        source_type: EmailSourceType,
        source_id: UUID | None,
    ) -> SentEmail:
        sent = await self.mail_sender.send(to=to, subject=subject, body=body)
        if not sent:
            logger.warning("Email not sent", email_type=email_type, to=to)

        entry = EmailLogCreate(
            recipient_email=to,
            recipient_name=name or None,
            email_type=email_type,
            subject=subject,
            body=body,
            source_type=source_type,
            source_id=source_id,
            status=EmailStatus.SENT if sent else EmailStatus.FAILED,
        )
        logged: BestEffortResult[EmailLogResponse] = await run_best_effort(
            "email_log", lambda: self.email_log_dao.create(db, obj_in=entry), email_type=email_type
        )
        if not logged.ok:
            await db.rollback()

        return SentEmail(email_type=email_type, to=to, subject=subject, sent=sent)
