"""
Roadmap schemas.
"""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from prodmatic.models.roadmap import RoadmapItemType, RoadmapLane, RoadmapStatus


class RoadmapItemCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    type: RoadmapItemType = RoadmapItemType.feature
    status: RoadmapStatus = RoadmapStatus.planned
    lane: RoadmapLane = RoadmapLane.later
    quarter: str | None = Field(default=None, max_length=10)
    start_date: date | None = None
    end_date: date | None = None
    effort: int | None = Field(default=None, ge=0, le=100)
    confidence: int | None = Field(default=None, ge=1, le=5)
    position: int = Field(default=0, ge=0)


class RoadmapItemUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    type: RoadmapItemType | None = None
    quarter: str | None = Field(default=None, max_length=10)
    start_date: date | None = None
    end_date: date | None = None
    effort: int | None = Field(default=None, ge=0, le=100)
    confidence: int | None = Field(default=None, ge=1, le=5)


class RoadmapMoveRequest(BaseModel):
    lane: RoadmapLane
    position: int | None = Field(default=None, ge=0)


class RoadmapStatusUpdateRequest(BaseModel):
    status: RoadmapStatus


class RoadmapItemResponse(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    title: str
    description: str | None
    type: RoadmapItemType
    status: RoadmapStatus
    lane: RoadmapLane
    quarter: str | None
    start_date: date | None
    end_date: date | None
    effort: int | None
    confidence: int | None
    position: int
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RoadmapListResponse(BaseModel):
    items: list[RoadmapItemResponse]
    total: int


class RoadmapLaneResponse(BaseModel):
    lane: RoadmapLane
    items: list[RoadmapItemResponse]


class RoadmapLanesResponse(BaseModel):
    lanes: list[RoadmapLaneResponse]
