"""
OKR and key result schemas.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from prodmatic.models.okr import KeyResultStatus, KeyResultType, OkrStatus

QUARTER = r"^Q[1-4]$"


class KeyResultCreateRequest(BaseModel):
    description: str = Field(min_length=1, max_length=300)
    target: float = Field(ge=0)
    current: float = Field(default=0, ge=0)
    unit: str | None = Field(default=None, max_length=50)
    type: KeyResultType = KeyResultType.increase


class KeyResultUpdateRequest(BaseModel):
    description: str | None = Field(default=None, min_length=1, max_length=300)
    target: float | None = Field(default=None, ge=0)
    current: float | None = Field(default=None, ge=0)
    unit: str | None = Field(default=None, max_length=50)
    type: KeyResultType | None = None
    status: KeyResultStatus | None = None


class OkrCreateRequest(BaseModel):
    objective: str = Field(min_length=1, max_length=300)
    description: str | None = None
    quarter: str = Field(pattern=QUARTER)
    year: int = Field(ge=2020, le=2100)
    owner_id: UUID | None = None
    key_results: list[KeyResultCreateRequest] = Field(min_length=1, max_length=10)


class OkrUpdateRequest(BaseModel):
    objective: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = None
    quarter: str | None = Field(default=None, pattern=QUARTER)
    year: int | None = Field(default=None, ge=2020, le=2100)
    owner_id: UUID | None = None
    status: OkrStatus | None = None


class KeyResultResponse(BaseModel):
    id: UUID
    okr_id: UUID
    description: str
    target: float
    current: float
    unit: str | None
    type: KeyResultType
    status: KeyResultStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OkrResponse(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    objective: str
    description: str | None
    quarter: str
    year: int
    owner_id: UUID | None
    status: OkrStatus
    progress: float
    created_by: UUID
    created_at: datetime
    updated_at: datetime
    key_results: list[KeyResultResponse] = []

    model_config = {"from_attributes": True}


class OkrListResponse(BaseModel):
    okrs: list[OkrResponse]
    total: int
