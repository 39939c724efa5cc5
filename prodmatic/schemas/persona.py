"""
Persona schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class PersonaCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    is_primary: bool = False
    demographics: dict[str, Any] = Field(default_factory=dict)
    goals: list[str] = Field(default_factory=list)
    pains: list[str] = Field(default_factory=list)
    gains: list[str] = Field(default_factory=list)
    behaviors: list[str] = Field(default_factory=list)
    motivations: list[str] = Field(default_factory=list)
    channels: list[str] = Field(default_factory=list)


class PersonaUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1)
    demographics: dict[str, Any] | None = None
    goals: list[str] | None = None
    pains: list[str] | None = None
    gains: list[str] | None = None
    behaviors: list[str] | None = None
    motivations: list[str] | None = None
    channels: list[str] | None = None


class PersonaPrimaryRequest(BaseModel):
    is_primary: bool


class PersonaResponse(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    name: str
    description: str
    is_primary: bool
    demographics: dict[str, Any]
    goals: list[str]
    pains: list[str]
    gains: list[str]
    behaviors: list[str]
    motivations: list[str]
    channels: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PersonaListResponse(BaseModel):
    personas: list[PersonaResponse]
    total: int
