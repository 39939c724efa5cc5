"""
KPI schemas.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from prodmatic.models.kpi import KpiFrequency


class KpiCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    metric: str = Field(min_length=1, max_length=200)
    target: float = Field(ge=0)
    frequency: KpiFrequency = KpiFrequency.monthly
    owner_id: UUID | None = None
    is_active: bool = True


class KpiUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    metric: str | None = Field(default=None, min_length=1, max_length=200)
    target: float | None = Field(default=None, ge=0)
    frequency: KpiFrequency | None = None
    owner_id: UUID | None = None
    is_active: bool | None = None


class KpiResponse(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    name: str
    description: str | None
    metric: str
    target: float
    frequency: KpiFrequency
    owner_id: UUID | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class KpiListResponse(BaseModel):
    kpis: list[KpiResponse]
    total: int
