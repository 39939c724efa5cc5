"""
OKR and key result endpoints.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import OrgContext, get_guard, get_org_context, get_redis
from prodmatic.core.permissions import MembershipGuard
from prodmatic.schemas.okr import (
    KeyResultResponse,
    KeyResultUpdateRequest,
    OkrCreateRequest,
    OkrListResponse,
    OkrResponse,
    OkrUpdateRequest,
)
from prodmatic.services.okr_service import KeyResultService, OkrService

router = APIRouter()


def get_okr_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> OkrService:
    return OkrService(db=db, redis=redis, guard=guard)


def get_key_result_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> KeyResultService:
    return KeyResultService(db=db, redis=redis, guard=guard)


# ---------------------------------------------------------------------------
# OKRs
# ---------------------------------------------------------------------------

@router.get(
    "/organizations/{slug}/products/{product_id}/okrs",
    response_model=OkrListResponse,
    summary="List OKRs of a product",
)
async def list_okrs(
    product_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: OkrService = Depends(get_okr_service),
) -> OkrListResponse:
    okrs = await service.list_items(ctx, product_id)
    return OkrListResponse(okrs=okrs, total=len(okrs))


@router.post(
    "/organizations/{slug}/products/{product_id}/okrs",
    response_model=OkrResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an OKR with its key results",
)
async def create_okr(
    product_id: UUID,
    data: OkrCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: OkrService = Depends(get_okr_service),
) -> OkrResponse:
    return await service.create(ctx, data, product_id)


@router.get("/organizations/{slug}/okrs/{okr_id}", response_model=OkrResponse)
async def get_okr(
    okr_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: OkrService = Depends(get_okr_service),
) -> OkrResponse:
    return await service.get(ctx, okr_id)


@router.patch("/organizations/{slug}/okrs/{okr_id}", response_model=OkrResponse)
async def update_okr(
    okr_id: UUID,
    data: OkrUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: OkrService = Depends(get_okr_service),
) -> OkrResponse:
    return await service.update(ctx, okr_id, data)


@router.post(
    "/organizations/{slug}/okrs/{okr_id}/recalculate", response_model=OkrResponse
)
async def recalculate_okr_progress(
    okr_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: OkrService = Depends(get_okr_service),
) -> OkrResponse:
    return await service.recalculate_progress(ctx, okr_id)


@router.delete("/organizations/{slug}/okrs/{okr_id}", status_code=status.HTTP_200_OK)
async def delete_okr(
    okr_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: OkrService = Depends(get_okr_service),
) -> dict:
    """Soft delete together with the key results."""
    await service.delete(ctx, okr_id)
    return {}


# ---------------------------------------------------------------------------
# Key results
# ---------------------------------------------------------------------------

@router.patch(
    "/organizations/{slug}/key-results/{key_result_id}", response_model=KeyResultResponse
)
async def update_key_result(
    key_result_id: UUID,
    data: KeyResultUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: KeyResultService = Depends(get_key_result_service),
) -> KeyResultResponse:
    """Check in on a key result; the OKR progress follows."""
    return await service.update(ctx, key_result_id, data)
