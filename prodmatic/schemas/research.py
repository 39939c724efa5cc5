"""
Customer research schemas: customers, interviews and insights.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from prodmatic.models.research import InsightImpact, InsightSource, InterviewStatus


# ---------------------------------------------------------------------------
# Customer
# ---------------------------------------------------------------------------

class CustomerCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr | None = None
    company: str | None = Field(default=None, max_length=200)
    segment: str | None = Field(default=None, max_length=100)
    attributes: dict[str, Any] = Field(default_factory=dict)


class CustomerUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: EmailStr | None = None
    company: str | None = Field(default=None, max_length=200)
    segment: str | None = Field(default=None, max_length=100)
    attributes: dict[str, Any] | None = None


class CustomerResponse(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    name: str
    email: str | None
    company: str | None
    segment: str | None
    attributes: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CustomerListResponse(BaseModel):
    customers: list[CustomerResponse]
    total: int


# ---------------------------------------------------------------------------
# Interview
# ---------------------------------------------------------------------------

class InterviewCreateRequest(BaseModel):
    """scheduled_at must lie in the future."""

    customer_id: UUID
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    scheduled_at: datetime
    duration: int = Field(default=60, ge=15, le=180)
    location: str | None = Field(default=None, max_length=200)
    objectives: list[str] = Field(default_factory=list)
    questions: list[str] = Field(default_factory=list)


class InterviewUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    scheduled_at: datetime | None = None
    duration: int | None = Field(default=None, ge=15, le=180)
    location: str | None = Field(default=None, max_length=200)
    status: InterviewStatus | None = None
    objectives: list[str] | None = None
    questions: list[str] | None = None
    notes: str | None = None


class InterviewResponse(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    customer_id: UUID
    title: str
    description: str | None
    scheduled_at: datetime
    duration: int
    location: str | None
    status: InterviewStatus
    objectives: list[str]
    questions: list[str]
    notes: str | None
    conductor_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class InterviewListResponse(BaseModel):
    interviews: list[InterviewResponse]
    total: int


# ---------------------------------------------------------------------------
# Insight
# ---------------------------------------------------------------------------

class InsightCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    source: InsightSource = InsightSource.interview
    impact: InsightImpact = InsightImpact.medium
    confidence: int = Field(default=3, ge=1, le=5)
    tags: list[str] = Field(default_factory=list)


class InsightUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1)
    source: InsightSource | None = None
    impact: InsightImpact | None = None
    confidence: int | None = Field(default=None, ge=1, le=5)
    tags: list[str] | None = None


class InsightResponse(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    interview_id: UUID
    title: str
    description: str
    source: InsightSource
    impact: InsightImpact
    confidence: int
    tags: list[str]
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class InsightListResponse(BaseModel):
    insights: list[InsightResponse]
    total: int
