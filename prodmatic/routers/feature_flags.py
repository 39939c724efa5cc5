"""
Feature flag endpoints.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import OrgContext, get_guard, get_org_context, get_redis
from prodmatic.core.permissions import MembershipGuard
from prodmatic.schemas.feature_flag import (
    FeatureFlagCreateRequest,
    FeatureFlagListResponse,
    FeatureFlagResponse,
    FeatureFlagRolloutRequest,
    FeatureFlagToggleRequest,
    FeatureFlagUpdateRequest,
)
from prodmatic.services.feature_flag_service import FeatureFlagService

router = APIRouter()


def get_feature_flag_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> FeatureFlagService:
    return FeatureFlagService(db=db, redis=redis, guard=guard)


@router.get(
    "/organizations/{slug}/products/{product_id}/feature-flags",
    response_model=FeatureFlagListResponse,
    summary="List feature flags of a product",
)
async def list_feature_flags(
    product_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: FeatureFlagService = Depends(get_feature_flag_service),
) -> FeatureFlagListResponse:
    flags = await service.list_items(ctx, product_id)
    return FeatureFlagListResponse(feature_flags=flags, total=len(flags))


@router.post(
    "/organizations/{slug}/products/{product_id}/feature-flags",
    response_model=FeatureFlagResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_feature_flag(
    product_id: UUID,
    data: FeatureFlagCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: FeatureFlagService = Depends(get_feature_flag_service),
) -> FeatureFlagResponse:
    """Keys are letters, digits, underscores and hyphens, unique per product."""
    return await service.create(ctx, data, product_id)


@router.get(
    "/organizations/{slug}/feature-flags/{flag_id}", response_model=FeatureFlagResponse
)
async def get_feature_flag(
    flag_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: FeatureFlagService = Depends(get_feature_flag_service),
) -> FeatureFlagResponse:
    return await service.get(ctx, flag_id)


@router.patch(
    "/organizations/{slug}/feature-flags/{flag_id}", response_model=FeatureFlagResponse
)
async def update_feature_flag(
    flag_id: UUID,
    data: FeatureFlagUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: FeatureFlagService = Depends(get_feature_flag_service),
) -> FeatureFlagResponse:
    return await service.update(ctx, flag_id, data)


@router.put(
    "/organizations/{slug}/feature-flags/{flag_id}/enabled",
    response_model=FeatureFlagResponse,
)
async def toggle_feature_flag(
    flag_id: UUID,
    data: FeatureFlagToggleRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: FeatureFlagService = Depends(get_feature_flag_service),
) -> FeatureFlagResponse:
    return await service.toggle(ctx, flag_id, data.enabled)


@router.put(
    "/organizations/{slug}/feature-flags/{flag_id}/rollout",
    response_model=FeatureFlagResponse,
)
async def set_feature_flag_rollout(
    flag_id: UUID,
    data: FeatureFlagRolloutRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: FeatureFlagService = Depends(get_feature_flag_service),
) -> FeatureFlagResponse:
    return await service.set_rollout(ctx, flag_id, data.rollout)


@router.delete(
    "/organizations/{slug}/feature-flags/{flag_id}", status_code=status.HTTP_200_OK
)
async def delete_feature_flag(
    flag_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: FeatureFlagService = Depends(get_feature_flag_service),
) -> dict:
    await service.delete(ctx, flag_id)
    return {}
