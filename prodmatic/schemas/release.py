"""
Release and launch checklist schemas.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from prodmatic.models.release import (
    ChangelogType,
    ChangelogVisibility,
    ChecklistCategory,
    ReleaseStatus,
    ReleaseType,
)


# ---------------------------------------------------------------------------
# Release
# ---------------------------------------------------------------------------

class ReleaseCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    version: str = Field(min_length=1, max_length=50)
    description: str | None = None
    notes: str | None = None
    type: ReleaseType = ReleaseType.minor
    release_date: datetime | None = None


class ReleaseUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    version: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = None
    notes: str | None = None
    type: ReleaseType | None = None
    release_date: datetime | None = None


class ReleaseStatusUpdateRequest(BaseModel):
    status: ReleaseStatus


class ReleaseResponse(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    name: str
    version: str
    description: str | None
    notes: str | None
    type: ReleaseType
    status: ReleaseStatus
    release_date: datetime | None
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ReleaseListResponse(BaseModel):
    releases: list[ReleaseResponse]
    total: int


# ---------------------------------------------------------------------------
# Checklist
# ---------------------------------------------------------------------------

class ChecklistItemCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    category: ChecklistCategory = ChecklistCategory.preparation
    is_required: bool = False
    assignee_id: UUID | None = None
    due_date: date | None = None


class ChecklistItemUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    category: ChecklistCategory | None = None
    is_required: bool | None = None
    assignee_id: UUID | None = None
    due_date: date | None = None


class ChecklistTemplateRequest(BaseModel):
    template: Literal["basic", "comprehensive", "enterprise"]


class ChecklistItemResponse(BaseModel):
    id: UUID
    org_id: UUID
    release_id: UUID
    title: str
    description: str | None
    category: ChecklistCategory
    is_required: bool
    is_completed: bool
    completed_at: datetime | None
    assignee_id: UUID | None
    due_date: date | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ChecklistListResponse(BaseModel):
    items: list[ChecklistItemResponse]
    total: int


class ReleaseReadinessResponse(BaseModel):
    release_id: UUID
    total: int
    completed: int
    required: int
    required_completed: int
    percent_complete: float
    ready: bool


# ---------------------------------------------------------------------------
# Changelog
# ---------------------------------------------------------------------------

class ChangelogCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    type: ChangelogType = ChangelogType.feature
    visibility: ChangelogVisibility = ChangelogVisibility.public
    release_id: UUID | None = None


class ChangelogUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1)
    type: ChangelogType | None = None
    visibility: ChangelogVisibility | None = None
    release_id: UUID | None = None


class ChangelogResponse(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    release_id: UUID | None
    title: str
    description: str
    type: ChangelogType
    visibility: ChangelogVisibility
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ChangelogListResponse(BaseModel):
    changelogs: list[ChangelogResponse]
    total: int
