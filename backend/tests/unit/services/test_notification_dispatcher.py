"""Unit tests for NotificationDispatcher."""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from app.schemas.email import SendEmailRequest, TestEmailRequest
from app.services.notification_dispatcher import NotificationDispatcher, format_start_date
from app.services.paywall_store import PaywallContext
from common.core.app_error import AppException, Errors
from enrollment_db.crud.course import CourseDAO
from enrollment_db.crud.email_log import EmailLogDAO
from enrollment_db.models.email_log import EmailStatus, EmailType
from enrollment_db.schemas.course import CohortResponse, CourseResponse
from enrollment_db.schemas.paywall import PaywallResponse

LOGIN_URL = "https://school.example.com/login"


def _dispatcher(mail_sender: MagicMock, email_log_dao: EmailLogDAO | None = None) -> NotificationDispatcher:
    return NotificationDispatcher(
        mail_sender, email_log_dao or EmailLogDAO(), CourseDAO(), login_url=LOGIN_URL, default_test_recipient="ops@example.com"
    )


def _context(**paywall_fields: object) -> PaywallContext:
    paywall = PaywallResponse.model_validate({"id": uuid4(), "slug": "offer", "name": "Capacity Program", **paywall_fields})
    course = CourseResponse(id=uuid4(), title="Capacity 101")
    cohort = CohortResponse(id=uuid4(), course_id=course.id, name="Spring 2026", start_date=date(2026, 3, 15))
    return PaywallContext(paywall=paywall, course=course, cohort=cohort)


def test_format_start_date() -> None:
    assert format_start_date(date(2026, 3, 5)) == "March 5, 2026"
    assert format_start_date(None) == "TBD"


@pytest.mark.asyncio
async def test_default_confirmation_when_no_template(session, mail_sender) -> None:
    report = await _dispatcher(mail_sender).send_payment_notifications(
        session, email="jo@example.com", name=None, context=_context()
    )

    assert [e.email_type for e in report.emails] == [EmailType.PAYMENT_CONFIRMATION]
    kwargs = mail_sender.send.await_args.kwargs
    assert kwargs["to"] == "jo@example.com"
    assert kwargs["subject"] == "Welcome to Capacity 101!"
    assert kwargs["body"].startswith("Hi there,\n\nThank you for enrolling in Capacity 101!")
    assert kwargs["body"].endswith("Warm regards,\nThe Neuro Progeny Team")


@pytest.mark.asyncio
async def test_templates_are_merged_and_welcome_sent(session, mail_sender) -> None:
    context = _context(
        confirmation_email_subject="You're in, {{name}}",
        confirmation_email_body="{{course_name}} / {{cohort_name}} starts {{start_date}}. Sign in: {{login_url}} {{unknown}}",
        welcome_email_subject="Welcome {{name}}",
        welcome_email_body="See you, {{email}}",
    )

    report = await _dispatcher(mail_sender).send_payment_notifications(
        session, email="jo@example.com", name="Jo", context=context
    )

    assert report.all_sent
    assert [e.email_type for e in report.emails] == [EmailType.PAYMENT_CONFIRMATION, EmailType.PAYWALL_WELCOME]
    confirmation, welcome = (call.kwargs for call in mail_sender.send.await_args_list)
    assert confirmation["subject"] == "You're in, Jo"
    assert confirmation["body"] == f"Capacity 101 / Spring 2026 starts March 15, 2026. Sign in: {LOGIN_URL} {{{{unknown}}}}"
    assert welcome["subject"] == "Welcome Jo"
    assert welcome["body"] == "See you, jo@example.com"

    logged = await EmailLogDAO().list_for_recipient(session, "jo@example.com")
    assert {entry.email_type for entry in logged} == {EmailType.PAYMENT_CONFIRMATION, EmailType.PAYWALL_WELCOME}
    assert all(entry.status == EmailStatus.SENT for entry in logged)


@pytest.mark.asyncio
async def test_welcome_needs_subject_and_body(session, mail_sender) -> None:
    context = _context(welcome_email_subject="Welcome {{name}}")

    report = await _dispatcher(mail_sender).send_payment_notifications(
        session, email="jo@example.com", name="Jo", context=context
    )

    assert [e.email_type for e in report.emails] == [EmailType.PAYMENT_CONFIRMATION]
    assert mail_sender.send.await_count == 1


@pytest.mark.asyncio
async def test_failed_send_is_logged_as_failed(session, mail_sender) -> None:
    mail_sender.send.return_value = False

    report = await _dispatcher(mail_sender).send_payment_notifications(
        session, email="jo@example.com", name="Jo", context=_context()
    )

    assert not report.all_sent
    [entry] = await EmailLogDAO().list_for_recipient(session, "jo@example.com")
    assert entry.status == EmailStatus.FAILED


@pytest.mark.asyncio
async def test_email_log_failure_is_swallowed(mail_sender) -> None:
    email_log_dao = MagicMock(spec=EmailLogDAO)
    email_log_dao.create = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("no such table: email_log")))
    db = MagicMock()
    db.rollback = AsyncMock()

    report = await _dispatcher(mail_sender, email_log_dao).send_payment_notifications(
        db, email="jo@example.com", name="Jo", context=_context()
    )

    assert report.all_sent
    db.rollback.assert_awaited()


@pytest.mark.asyncio
async def test_course_welcome_uses_default_body_with_login_url(session, mail_sender, course, cohort) -> None:
    request = SendEmailRequest(type="course_welcome", email="jo@example.com", name="Jo", course_id=course.id, cohort_id=cohort.id)

    result = await _dispatcher(mail_sender).send_course_welcome(session, request)

    assert result.success
    assert result.message == "Email sent to jo@example.com"
    kwargs = mail_sender.send.await_args.kwargs
    assert kwargs["subject"] == "Welcome to Capacity 101!"
    assert f"Sign in at {LOGIN_URL} to get started." in kwargs["body"]
    [entry] = await EmailLogDAO().list_for_recipient(session, "jo@example.com")
    assert entry.email_type == EmailType.COURSE_WELCOME
    assert entry.source_id == course.id


@pytest.mark.asyncio
async def test_course_welcome_validation(session, mail_sender, course) -> None:
    dispatcher = _dispatcher(mail_sender)

    with pytest.raises(AppException) as missing:
        await dispatcher.send_course_welcome(session, SendEmailRequest(type="course_welcome"))
    with pytest.raises(AppException) as invalid:
        await dispatcher.send_course_welcome(session, SendEmailRequest(type="newsletter", email="jo@example.com"))
    with pytest.raises(AppException) as not_found:
        await dispatcher.send_course_welcome(
            session, SendEmailRequest(type="course_welcome", email="jo@example.com", course_id=uuid4())
        )

    assert str(missing.value) == "Missing type or email"
    assert Errors.Email.INVALID_TYPE.is_(invalid.value)
    assert Errors.Email.COURSE_NOT_FOUND.is_(not_found.value)
    mail_sender.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_test_email_defaults(mail_sender) -> None:
    result = await _dispatcher(mail_sender).send_test(TestEmailRequest())

    assert result.success
    mail_sender.send.assert_awaited_once_with(
        to="ops@example.com",
        subject="Test Email from Neuro Progeny University",
        body="This is a test email. If you received this, Gmail API is working!",
    )


@pytest.mark.asyncio
async def test_test_email_failure_raises(mail_sender) -> None:
    mail_sender.send.return_value = False

    with pytest.raises(AppException) as exc_info:
        await _dispatcher(mail_sender).send_test(TestEmailRequest(to="x@example.com", custom_body="hello"))

    assert Errors.Email.SEND_FAILED.is_(exc_info.value)
    assert mail_sender.send.await_args.kwargs["body"] == "hello"
