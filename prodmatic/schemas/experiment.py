"""
Experiment schemas.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from prodmatic.models.experiment import ExperimentStatus, ExperimentType


class Variant(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    allocation: float = Field(ge=0, le=100, description="Traffic share in percent")


def _check_allocation(variants: list[Variant] | None) -> list[Variant] | None:
    if variants and sum(v.allocation for v in variants) > 100:
        raise ValueError("Variant allocations cannot exceed 100% in total")
    return variants


class ExperimentCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    hypothesis: str = Field(min_length=1)
    type: ExperimentType = ExperimentType.ab_test
    audience: str | None = Field(default=None, max_length=200)
    start_date: date | None = None
    end_date: date | None = None
    owner_id: UUID | None = None
    metrics: list[str] = Field(default_factory=list)
    variants: list[Variant] = Field(default_factory=list)

    @field_validator("variants")
    @classmethod
    def allocations_fit(cls, v: list[Variant]) -> list[Variant]:
        return _check_allocation(v)


class ExperimentUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    hypothesis: str | None = Field(default=None, min_length=1)
    type: ExperimentType | None = None
    audience: str | None = Field(default=None, max_length=200)
    start_date: date | None = None
    end_date: date | None = None
    owner_id: UUID | None = None
    metrics: list[str] | None = None
    variants: list[Variant] | None = None
    results: dict[str, Any] | None = None
    conclusion: str | None = None

    @field_validator("variants")
    @classmethod
    def allocations_fit(cls, v: list[Variant] | None) -> list[Variant] | None:
        return _check_allocation(v)


class ExperimentStatusUpdateRequest(BaseModel):
    status: ExperimentStatus


class ExperimentResponse(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    name: str
    description: str | None
    hypothesis: str
    type: ExperimentType
    status: ExperimentStatus
    audience: str | None
    start_date: date | None
    end_date: date | None
    owner_id: UUID | None
    metrics: list[str]
    variants: list[Variant]
    results: dict[str, Any] | None
    conclusion: str | None
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ExperimentListResponse(BaseModel):
    experiments: list[ExperimentResponse]
    total: int
