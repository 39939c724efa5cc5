"""
Idea endpoints.

Ideas are listed per product, highest RICE score first.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import OrgContext, get_guard, get_org_context, get_redis
from prodmatic.core.permissions import MembershipGuard
from prodmatic.schemas.idea import (
    IdeaCreateRequest,
    IdeaListResponse,
    IdeaResponse,
    IdeaStatusUpdateRequest,
    IdeaUpdateRequest,
    IdeaVoteRequest,
)
from prodmatic.services.idea_service import IdeaService

router = APIRouter()


def get_idea_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> IdeaService:
    return IdeaService(db=db, redis=redis, guard=guard)


# ---------------------------------------------------------------------------
# List / Create
# ---------------------------------------------------------------------------

@router.get(
    "/organizations/{slug}/products/{product_id}/ideas",
    response_model=IdeaListResponse,
    summary="List ideas of a product",
)
async def list_ideas(
    product_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: IdeaService = Depends(get_idea_service),
) -> IdeaListResponse:
    ideas = await service.list_items(ctx, product_id)
    return IdeaListResponse(ideas=ideas, total=len(ideas))


@router.post(
    "/organizations/{slug}/products/{product_id}/ideas",
    response_model=IdeaResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit an idea",
)
async def create_idea(
    product_id: UUID,
    data: IdeaCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: IdeaService = Depends(get_idea_service),
) -> IdeaResponse:
    return await service.create(ctx, data, product_id)


# ---------------------------------------------------------------------------
# Single idea
# ---------------------------------------------------------------------------

@router.get("/organizations/{slug}/ideas/{idea_id}", response_model=IdeaResponse)
async def get_idea(
    idea_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: IdeaService = Depends(get_idea_service),
) -> IdeaResponse:
    return await service.get(ctx, idea_id)


@router.patch("/organizations/{slug}/ideas/{idea_id}", response_model=IdeaResponse)
async def update_idea(
    idea_id: UUID,
    data: IdeaUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: IdeaService = Depends(get_idea_service),
) -> IdeaResponse:
    """The creator or a product manager may edit an idea."""
    return await service.update(ctx, idea_id, data)


@router.post("/organizations/{slug}/ideas/{idea_id}/vote", response_model=IdeaResponse)
async def vote_idea(
    idea_id: UUID,
    data: IdeaVoteRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: IdeaService = Depends(get_idea_service),
) -> IdeaResponse:
    return await service.vote(ctx, idea_id, data.direction)


@router.put("/organizations/{slug}/ideas/{idea_id}/status", response_model=IdeaResponse)
async def set_idea_status(
    idea_id: UUID,
    data: IdeaStatusUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: IdeaService = Depends(get_idea_service),
) -> IdeaResponse:
    return await service.set_status(ctx, idea_id, data.status)


@router.delete("/organizations/{slug}/ideas/{idea_id}", status_code=status.HTTP_200_OK)
async def delete_idea(
    idea_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: IdeaService = Depends(get_idea_service),
) -> dict:
    """The creator or an admin may delete an idea."""
    await service.delete(ctx, idea_id)
    return {}
