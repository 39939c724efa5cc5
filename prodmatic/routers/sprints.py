"""
Sprint endpoints.

CRUD, lifecycle (start / complete / cancel), sprint scope and the kanban board.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import OrgContext, get_guard, get_org_context, get_redis
from prodmatic.core.permissions import MembershipGuard
from prodmatic.schemas.sprint import (
    SprintBoardResponse,
    SprintCompleteRequest,
    SprintCreateRequest,
    SprintListResponse,
    SprintResponse,
    SprintTasksRequest,
    SprintUpdateRequest,
)
from prodmatic.services.sprint_service import SprintService

router = APIRouter()


def get_sprint_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> SprintService:
    return SprintService(db=db, redis=redis, guard=guard)


# ---------------------------------------------------------------------------
# List / Create
# ---------------------------------------------------------------------------

@router.get(
    "/organizations/{slug}/products/{product_id}/sprints",
    response_model=SprintListResponse,
    summary="List sprints of a product",
)
async def list_sprints(
    product_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: SprintService = Depends(get_sprint_service),
) -> SprintListResponse:
    sprints = await service.list_items(ctx, product_id)
    return SprintListResponse(sprints=sprints, total=len(sprints))


@router.post(
    "/organizations/{slug}/products/{product_id}/sprints",
    response_model=SprintResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a sprint",
)
async def create_sprint(
    product_id: UUID,
    data: SprintCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: SprintService = Depends(get_sprint_service),
) -> SprintResponse:
    return await service.create(ctx, data, product_id)


# ---------------------------------------------------------------------------
# Single sprint
# ---------------------------------------------------------------------------

@router.get("/organizations/{slug}/sprints/{sprint_id}", response_model=SprintResponse)
async def get_sprint(
    sprint_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: SprintService = Depends(get_sprint_service),
) -> SprintResponse:
    return await service.get(ctx, sprint_id)


@router.patch("/organizations/{slug}/sprints/{sprint_id}", response_model=SprintResponse)
async def update_sprint(
    sprint_id: UUID,
    data: SprintUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: SprintService = Depends(get_sprint_service),
) -> SprintResponse:
    return await service.update(ctx, sprint_id, data)


@router.delete("/organizations/{slug}/sprints/{sprint_id}", status_code=status.HTTP_200_OK)
async def delete_sprint(
    sprint_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: SprintService = Depends(get_sprint_service),
) -> dict:
    """Soft delete; the sprint's tasks return to the backlog."""
    await service.delete(ctx, sprint_id)
    return {}


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

@router.post("/organizations/{slug}/sprints/{sprint_id}/start", response_model=SprintResponse)
async def start_sprint(
    sprint_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: SprintService = Depends(get_sprint_service),
) -> SprintResponse:
    """
    Start a planned sprint.

    - Only one sprint per product can be active
    - The sprint must contain at least one task
    """
    return await service.start(ctx, sprint_id)


@router.post(
    "/organizations/{slug}/sprints/{sprint_id}/complete", response_model=SprintResponse
)
async def complete_sprint(
    sprint_id: UUID,
    data: SprintCompleteRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: SprintService = Depends(get_sprint_service),
) -> SprintResponse:
    """Complete the active sprint and record its velocity."""
    return await service.complete(ctx, sprint_id, data.incomplete_task_action)


@router.post("/organizations/{slug}/sprints/{sprint_id}/cancel", response_model=SprintResponse)
async def cancel_sprint(
    sprint_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: SprintService = Depends(get_sprint_service),
) -> SprintResponse:
    return await service.cancel(ctx, sprint_id)


# ---------------------------------------------------------------------------
# Scope and board
# ---------------------------------------------------------------------------

@router.post("/organizations/{slug}/sprints/{sprint_id}/tasks", response_model=SprintResponse)
async def add_sprint_tasks(
    sprint_id: UUID,
    data: SprintTasksRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: SprintService = Depends(get_sprint_service),
) -> SprintResponse:
    return await service.add_tasks(ctx, sprint_id, data.task_ids)


@router.delete(
    "/organizations/{slug}/sprints/{sprint_id}/tasks/{task_id}", response_model=SprintResponse
)
async def remove_sprint_task(
    sprint_id: UUID,
    task_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: SprintService = Depends(get_sprint_service),
) -> SprintResponse:
    return await service.remove_task(ctx, sprint_id, task_id)


@router.get(
    "/organizations/{slug}/sprints/{sprint_id}/board", response_model=SprintBoardResponse
)
async def get_sprint_board(
    sprint_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: SprintService = Depends(get_sprint_service),
) -> SprintBoardResponse:
    """Sprint tasks grouped into one kanban column per status."""
    return await service.board(ctx, sprint_id)
