"""
Sprint schemas.

Request/response models for sprint endpoints and the sprint kanban board.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from prodmatic.models.sprint import SprintStatus
from prodmatic.models.task import TaskStatus
from prodmatic.schemas.task import TaskResponse


class SprintCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    goal: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    capacity: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def end_after_start(self) -> SprintCreateRequest:
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class SprintUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    goal: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    capacity: int | None = Field(default=None, ge=0)


class SprintCompleteRequest(BaseModel):
    """Request body for POST /sprints/{sprint_id}/complete."""

    incomplete_task_action: Literal["keep", "move_to_backlog"] = "keep"


class SprintTasksRequest(BaseModel):
    task_ids: list[UUID] = Field(min_length=1, max_length=200)


class SprintResponse(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    name: str
    goal: str | None
    status: SprintStatus
    start_date: date | None
    end_date: date | None
    capacity: int | None
    velocity: int | None
    started_at: datetime | None
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SprintListResponse(BaseModel):
    sprints: list[SprintResponse]
    total: int


class BoardColumn(BaseModel):
    status: TaskStatus
    tasks: list[TaskResponse]
    count: int
    effort: int


class SprintBoardResponse(BaseModel):
    """Kanban view of a sprint: one column per task status, in workflow order."""

    sprint: SprintResponse
    columns: list[BoardColumn]
    total_effort: int
    completed_effort: int
