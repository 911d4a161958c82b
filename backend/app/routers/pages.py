"""Public checkout pages rendered with Jinja2."""

from decimal import Decimal
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_config_service, get_db, get_paywall_store
from app.services.notification_dispatcher import format_start_date
from app.services.paywall_store import PaywallStore
from common.core.app_error import AppException, Errors
from common.core.config_service import ConfigService
from enrollment_db.models.paywall import DEFAULT_CHARGE_DAYS_BEFORE

pages_router = APIRouter(default_response_class=HTMLResponse)

templates = Jinja2Templates(directory=Path(__file__).resolve().parent.parent / "templates")
templates.env.filters["money"] = lambda value: f"{Decimal(value):.2f}"

UNAVAILABLE_MESSAGE = "This enrollment page is not available."


# Declared before /checkout/{slug} so "success" is not taken for a slug
@pages_router.get("/checkout/success")
async def checkout_success(
    request: Request,
    config_service: Annotated[ConfigService, Depends(get_config_service)],
    session_id: str | None = None,
    paywall_id: str | None = None,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "checkout/success.html",
        {"session_id": session_id, "paywall_id": paywall_id, "login_url": config_service.site.login_url},
    )


@pages_router.get("/checkout/{slug}")
async def checkout_page(
    request: Request,
    slug: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    paywall_store: Annotated[PaywallStore, Depends(get_paywall_store)],
    canceled: bool = False,
) -> HTMLResponse:
    try:
        paywall = await paywall_store.get_active_by_slug(db, slug)
    except AppException as e:
        if not Errors.Paywall.NOT_FOUND.is_(e):
            raise
        return templates.TemplateResponse(
            request, "checkout/unavailable.html", {"message": UNAVAILABLE_MESSAGE}, status_code=status.HTTP_404_NOT_FOUND
        )

    context = await paywall_store.get_context(db, paywall)
    cohort = context.cohort
    return templates.TemplateResponse(
        request,
        "checkout/page.html",
        {
            "paywall": paywall,
            "course": context.course,
            "cohort": cohort,
            "start_date": format_start_date(cohort.start_date) if cohort else None,
            "charge_days_before": paywall.equipment_charge_days_before or DEFAULT_CHARGE_DAYS_BEFORE,
            "canceled": canceled,
        },
    )
