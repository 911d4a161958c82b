"""Paywall administration routes, protected by the admin bearer token."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db, get_paywall_admin_service, require_admin
from app.services.paywall_admin_service import PaywallAdminService
from common.ids import PaywallId
from enrollment_db.schemas.paywall import PaywallCreate, PaywallResponse, PaywallUpdate

paywalls_router = APIRouter(dependencies=[Depends(require_admin)])


@paywalls_router.get("/paywalls")
async def list_paywalls(
    db: Annotated[AsyncSession, Depends(get_db)],
    paywall_service: Annotated[PaywallAdminService, Depends(get_paywall_admin_service)],
    skip: int = 0,
    limit: int = 100,
) -> list[PaywallResponse]:
    """List paywalls, newest first."""
    return await paywall_service.list_paywalls(db, skip=skip, limit=limit)


@paywalls_router.post("/paywalls", status_code=status.HTTP_201_CREATED)
async def create_paywall(
    paywall_in: PaywallCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    paywall_service: Annotated[PaywallAdminService, Depends(get_paywall_admin_service)],
) -> PaywallResponse:
    return await paywall_service.create_paywall(db, paywall_in=paywall_in)


@paywalls_router.get("/paywalls/{paywall_id}")
async def get_paywall(
    paywall_id: PaywallId,
    db: Annotated[AsyncSession, Depends(get_db)],
    paywall_service: Annotated[PaywallAdminService, Depends(get_paywall_admin_service)],
) -> PaywallResponse:
    return await paywall_service.get_paywall(db, paywall_id)


@paywalls_router.patch("/paywalls/{paywall_id}")
async def update_paywall(
    paywall_id: PaywallId,
    paywall_in: PaywallUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    paywall_service: Annotated[PaywallAdminService, Depends(get_paywall_admin_service)],
) -> PaywallResponse:
    return await paywall_service.update_paywall(db, paywall_id, paywall_in=paywall_in)


@paywalls_router.post("/paywalls/{paywall_id}/toggle")
async def toggle_paywall(
    paywall_id: PaywallId,
    db: Annotated[AsyncSession, Depends(get_db)],
    paywall_service: Annotated[PaywallAdminService, Depends(get_paywall_admin_service)],
) -> PaywallResponse:
    """Activate or deactivate a paywall."""
    return await paywall_service.toggle_paywall(db, paywall_id)


@paywalls_router.delete("/paywalls/{paywall_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_paywall(
    paywall_id: PaywallId,
    db: Annotated[AsyncSession, Depends(get_db)],
    paywall_service: Annotated[PaywallAdminService, Depends(get_paywall_admin_service)],
) -> None:
    await paywall_service.delete_paywall(db, paywall_id)
