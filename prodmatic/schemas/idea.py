"""
Idea schemas.

Responses carry RICE, ICE and WSJF scores computed from the stored 1-5 inputs.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, computed_field

from prodmatic.models.idea import IdeaPriority, IdeaStatus
from prodmatic.services import scoring


class IdeaCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    problem: str | None = None
    hypothesis: str | None = None
    source: str | None = Field(default=None, max_length=100)
    tags: list[str] = Field(default_factory=list, max_length=20)
    priority: IdeaPriority = IdeaPriority.medium
    reach: int | None = Field(default=None, ge=1, le=5)
    impact: int | None = Field(default=None, ge=1, le=5)
    confidence: int | None = Field(default=None, ge=1, le=5)
    effort: int | None = Field(default=None, ge=1, le=5)


class IdeaUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    problem: str | None = None
    hypothesis: str | None = None
    source: str | None = Field(default=None, max_length=100)
    tags: list[str] | None = Field(default=None, max_length=20)
    priority: IdeaPriority | None = None
    reach: int | None = Field(default=None, ge=1, le=5)
    impact: int | None = Field(default=None, ge=1, le=5)
    confidence: int | None = Field(default=None, ge=1, le=5)
    effort: int | None = Field(default=None, ge=1, le=5)


class IdeaVoteRequest(BaseModel):
    direction: Literal["up", "down"]


class IdeaStatusUpdateRequest(BaseModel):
    status: IdeaStatus


class IdeaResponse(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    title: str
    description: str | None
    problem: str | None
    hypothesis: str | None
    source: str | None
    tags: list[str]
    priority: IdeaPriority
    status: IdeaStatus
    reach: int | None
    impact: int | None
    confidence: int | None
    effort: int | None
    votes: int
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def rice_score(self) -> float | None:
        return scoring.idea_rice(self.reach, self.impact, self.confidence, self.effort)

    @computed_field
    @property
    def ice_score(self) -> float | None:
        return scoring.idea_ice(self.impact, self.confidence, self.effort)

    @computed_field
    @property
    def wsjf_score(self) -> float | None:
        return scoring.idea_wsjf(self.impact, self.effort)


class IdeaListResponse(BaseModel):
    ideas: list[IdeaResponse]
    total: int
