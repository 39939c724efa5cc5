"""
Roadmap endpoints.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import OrgContext, get_guard, get_org_context, get_redis
from prodmatic.core.permissions import MembershipGuard
from prodmatic.schemas.roadmap import (
    RoadmapItemCreateRequest,
    RoadmapItemResponse,
    RoadmapItemUpdateRequest,
    RoadmapLanesResponse,
    RoadmapListResponse,
    RoadmapMoveRequest,
    RoadmapStatusUpdateRequest,
)
from prodmatic.services.roadmap_service import RoadmapService

router = APIRouter()


def get_roadmap_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> RoadmapService:
    return RoadmapService(db=db, redis=redis, guard=guard)


@router.get(
    "/organizations/{slug}/products/{product_id}/roadmap",
    response_model=RoadmapLanesResponse,
    summary="Roadmap of a product grouped by lane",
)
async def get_roadmap_lanes(
    product_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: RoadmapService = Depends(get_roadmap_service),
) -> RoadmapLanesResponse:
    return await service.lanes(ctx, product_id)


@router.get(
    "/organizations/{slug}/products/{product_id}/roadmap/items",
    response_model=RoadmapListResponse,
    summary="List roadmap items of a product",
)
async def list_roadmap_items(
    product_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: RoadmapService = Depends(get_roadmap_service),
) -> RoadmapListResponse:
    items = await service.list_items(ctx, product_id)
    return RoadmapListResponse(items=items, total=len(items))


@router.post(
    "/organizations/{slug}/products/{product_id}/roadmap/items",
    response_model=RoadmapItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_roadmap_item(
    product_id: UUID,
    data: RoadmapItemCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: RoadmapService = Depends(get_roadmap_service),
) -> RoadmapItemResponse:
    return await service.create(ctx, data, product_id)


@router.get("/organizations/{slug}/roadmap/{item_id}", response_model=RoadmapItemResponse)
async def get_roadmap_item(
    item_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: RoadmapService = Depends(get_roadmap_service),
) -> RoadmapItemResponse:
    return await service.get(ctx, item_id)


@router.patch("/organizations/{slug}/roadmap/{item_id}", response_model=RoadmapItemResponse)
async def update_roadmap_item(
    item_id: UUID,
    data: RoadmapItemUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: RoadmapService = Depends(get_roadmap_service),
) -> RoadmapItemResponse:
    return await service.update(ctx, item_id, data)


@router.put(
    "/organizations/{slug}/roadmap/{item_id}/lane", response_model=RoadmapItemResponse
)
async def move_roadmap_item(
    item_id: UUID,
    data: RoadmapMoveRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: RoadmapService = Depends(get_roadmap_service),
) -> RoadmapItemResponse:
    """Move to a lane; without a position the item goes to the end of it."""
    return await service.move(ctx, item_id, data.lane, data.position)


@router.put(
    "/organizations/{slug}/roadmap/{item_id}/status", response_model=RoadmapItemResponse
)
async def set_roadmap_item_status(
    item_id: UUID,
    data: RoadmapStatusUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: RoadmapService = Depends(get_roadmap_service),
) -> RoadmapItemResponse:
    return await service.set_status(ctx, item_id, data.status)


@router.delete("/organizations/{slug}/roadmap/{item_id}", status_code=status.HTTP_200_OK)
async def delete_roadmap_item(
    item_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: RoadmapService = Depends(get_roadmap_service),
) -> dict:
    await service.delete(ctx, item_id)
    return {}
