"""
KPI endpoints.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import OrgContext, get_guard, get_org_context, get_redis
from prodmatic.core.permissions import MembershipGuard
from prodmatic.schemas.kpi import KpiCreateRequest, KpiListResponse, KpiResponse, KpiUpdateRequest
from prodmatic.services.kpi_service import KpiService

router = APIRouter()


def get_kpi_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> KpiService:
    return KpiService(db=db, redis=redis, guard=guard)


@router.get(
    "/organizations/{slug}/products/{product_id}/kpis",
    response_model=KpiListResponse,
    summary="List KPIs of a product",
)
async def list_kpis(
    product_id: UUID,
    is_active: bool | None = Query(default=None),
    ctx: OrgContext = Depends(get_org_context),
    service: KpiService = Depends(get_kpi_service),
) -> KpiListResponse:
    kpis = await service.list_items(ctx, product_id, is_active=is_active)
    return KpiListResponse(kpis=kpis, total=len(kpis))


@router.post(
    "/organizations/{slug}/products/{product_id}/kpis",
    response_model=KpiResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_kpi(
    product_id: UUID,
    data: KpiCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: KpiService = Depends(get_kpi_service),
) -> KpiResponse:
    """Requires product manager. The owner must be a member of the organization."""
    return await service.create(ctx, data, product_id)


@router.get("/organizations/{slug}/kpis/{kpi_id}", response_model=KpiResponse)
async def get_kpi(
    kpi_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: KpiService = Depends(get_kpi_service),
) -> KpiResponse:
    return await service.get(ctx, kpi_id)


@router.patch("/organizations/{slug}/kpis/{kpi_id}", response_model=KpiResponse)
async def update_kpi(
    kpi_id: UUID,
    data: KpiUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: KpiService = Depends(get_kpi_service),
) -> KpiResponse:
    return await service.update(ctx, kpi_id, data)


@router.delete("/organizations/{slug}/kpis/{kpi_id}", status_code=status.HTTP_200_OK)
async def delete_kpi(
    kpi_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: KpiService = Depends(get_kpi_service),
) -> dict:
    await service.delete(ctx, kpi_id)
    return {}
