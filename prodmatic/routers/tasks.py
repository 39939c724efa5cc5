"""
Task endpoints.

CRUD, status, assignment, sprint planning, time logging and bulk updates.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import OrgContext, get_guard, get_org_context, get_redis
from prodmatic.core.permissions import MembershipGuard
from prodmatic.models.task import TaskPriority, TaskStatus, TaskType
from prodmatic.schemas.task import (
    BulkUpdateResponse,
    TaskAssigneeRequest,
    TaskBulkUpdateRequest,
    TaskCreateRequest,
    TaskListResponse,
    TaskResponse,
    TaskSprintRequest,
    TaskStatusUpdateRequest,
    TaskTimeLogRequest,
    TaskUpdateRequest,
)
from prodmatic.services.task_service import TaskService

router = APIRouter()


def get_task_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> TaskService:
    return TaskService(db=db, redis=redis, guard=guard)


# ---------------------------------------------------------------------------
# List / Create
# ---------------------------------------------------------------------------

@router.get(
    "/organizations/{slug}/products/{product_id}/tasks",
    response_model=TaskListResponse,
    summary="List tasks of a product",
)
async def list_tasks(
    product_id: UUID,
    status_filter: TaskStatus | None = Query(default=None, alias="status"),
    assignee_id: UUID | None = Query(default=None),
    sprint_id: UUID | None = Query(default=None),
    type: TaskType | None = Query(default=None),
    priority: TaskPriority | None = Query(default=None),
    ctx: OrgContext = Depends(get_org_context),
    service: TaskService = Depends(get_task_service),
) -> TaskListResponse:
    tasks = await service.list_items(
        ctx,
        product_id,
        status=status_filter,
        assignee_id=assignee_id,
        sprint_id=sprint_id,
        type=type,
        priority=priority,
    )
    return TaskListResponse(tasks=tasks, total=len(tasks))


@router.post(
    "/organizations/{slug}/products/{product_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
)
async def create_task(
    product_id: UUID,
    data: TaskCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.create(ctx, data, product_id)


# ---------------------------------------------------------------------------
# Bulk update
# ---------------------------------------------------------------------------

@router.patch(
    "/organizations/{slug}/tasks/bulk",
    response_model=BulkUpdateResponse,
    summary="Update many tasks at once",
)
async def bulk_update_tasks(
    data: TaskBulkUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: TaskService = Depends(get_task_service),
) -> BulkUpdateResponse:
    """
    Apply the given fields to every listed task. Requires product manager.

    Unknown, deleted or foreign task ids are skipped; the response reports
    how many tasks were updated.
    """
    changes = data.model_dump(exclude_unset=True, exclude={"task_ids"})
    updated = await service.bulk_update(ctx, data.task_ids, changes)
    return BulkUpdateResponse(updated=updated)


# ---------------------------------------------------------------------------
# Single task
# ---------------------------------------------------------------------------

@router.get("/organizations/{slug}/tasks/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.get(ctx, task_id)


@router.patch("/organizations/{slug}/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: UUID,
    data: TaskUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.update(ctx, task_id, data)


@router.put("/organizations/{slug}/tasks/{task_id}/status", response_model=TaskResponse)
async def set_task_status(
    task_id: UUID,
    data: TaskStatusUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.set_status(ctx, task_id, data.status)


@router.put("/organizations/{slug}/tasks/{task_id}/assignee", response_model=TaskResponse)
async def set_task_assignee(
    task_id: UUID,
    data: TaskAssigneeRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.set_assignee(ctx, task_id, data.assignee_id)


@router.put("/organizations/{slug}/tasks/{task_id}/sprint", response_model=TaskResponse)
async def move_task_to_sprint(
    task_id: UUID,
    data: TaskSprintRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Plan the task into a sprint, or send it back to the backlog with null."""
    return await service.move_to_sprint(ctx, task_id, data.sprint_id)


@router.post("/organizations/{slug}/tasks/{task_id}/time", response_model=TaskResponse)
async def log_task_time(
    task_id: UUID,
    data: TaskTimeLogRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return await service.log_time(ctx, task_id, data.hours)


@router.delete("/organizations/{slug}/tasks/{task_id}", status_code=status.HTTP_200_OK)
async def delete_task(
    task_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: TaskService = Depends(get_task_service),
) -> dict:
    await service.delete(ctx, task_id)
    return {}
