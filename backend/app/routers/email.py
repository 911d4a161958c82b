"""Transactional email routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db, get_notification_dispatcher
from app.schemas.email import EmailResult, MergeTagInfo, MergeTagList, SendEmailRequest, TestEmailRequest
from app.services.notification_dispatcher import NotificationDispatcher
from common.utils.template_substitution import MERGE_TAGS

email_router = APIRouter()


@email_router.post("/send-email")
async def send_email(
    req: SendEmailRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    dispatcher: Annotated[NotificationDispatcher, Depends(get_notification_dispatcher)],
) -> EmailResult:
    """Send a templated email. Only ``course_welcome`` is supported."""
    return await dispatcher.send_course_welcome(db, req)


@email_router.post("/test-email")
async def send_test_email(
    req: TestEmailRequest,
    dispatcher: Annotated[NotificationDispatcher, Depends(get_notification_dispatcher)],
) -> EmailResult:
    return await dispatcher.send_test(req)


@email_router.get("/email/merge-tags")
async def list_merge_tags() -> MergeTagList:
    """Merge tags available to email templates, for the template editor."""
    return MergeTagList(tags=[MergeTagInfo(tag=tag.tag, label=tag.label, description=tag.description) for tag in MERGE_TAGS.values()])
