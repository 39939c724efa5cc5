"""
Task schemas.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from prodmatic.models.task import TaskPriority, TaskStatus, TaskType


class TaskCreateRequest(BaseModel):
    """Request body for POST /organizations/{slug}/products/{product_id}/tasks."""

    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    type: TaskType = TaskType.task
    priority: TaskPriority = TaskPriority.medium
    status: TaskStatus = TaskStatus.new
    effort: int | None = Field(default=None, ge=0, le=100)
    time_estimate: float | None = Field(default=None, ge=0)
    acceptance_criteria: str | None = None
    assignee_id: UUID | None = None
    sprint_id: UUID | None = None


class TaskUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    type: TaskType | None = None
    priority: TaskPriority | None = None
    effort: int | None = Field(default=None, ge=0, le=100)
    time_estimate: float | None = Field(default=None, ge=0)
    acceptance_criteria: str | None = None


class TaskStatusUpdateRequest(BaseModel):
    status: TaskStatus


class TaskAssigneeRequest(BaseModel):
    assignee_id: UUID | None


class TaskSprintRequest(BaseModel):
    """Move a task into a sprint, or back to the backlog with null."""

    sprint_id: UUID | None


class TaskTimeLogRequest(BaseModel):
    hours: float = Field(gt=0, le=1000)


class TaskBulkUpdateRequest(BaseModel):
    """Only fields that are sent are applied to every listed task."""

    task_ids: list[UUID] = Field(min_length=1, max_length=200)
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    assignee_id: UUID | None = None
    sprint_id: UUID | None = None


class BulkUpdateResponse(BaseModel):
    updated: int


class TaskResponse(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    sprint_id: UUID | None
    title: str
    description: str | None
    type: TaskType
    priority: TaskPriority
    status: TaskStatus
    effort: int | None
    time_estimate: float | None
    time_spent: float
    acceptance_criteria: str | None
    assignee_id: UUID | None
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskListResponse(BaseModel):
    tasks: list[TaskResponse]
    total: int
