"""
Feature flag schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

FLAG_KEY_PATTERN = r"^[a-zA-Z0-9_-]+$"


class FeatureFlagCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    key: str = Field(min_length=1, max_length=100, pattern=FLAG_KEY_PATTERN)
    description: str | None = Field(default=None, max_length=2000)
    enabled: bool = False
    rollout: float = Field(default=0.0, ge=0.0, le=1.0)
    targeting: dict[str, Any] = Field(default_factory=dict)
    variants: dict[str, Any] = Field(default_factory=dict)


class FeatureFlagUpdateRequest(BaseModel):
    """Enabled state and rollout have their own endpoints."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    key: str | None = Field(default=None, min_length=1, max_length=100, pattern=FLAG_KEY_PATTERN)
    description: str | None = Field(default=None, max_length=2000)
    targeting: dict[str, Any] | None = None
    variants: dict[str, Any] | None = None


class FeatureFlagToggleRequest(BaseModel):
    enabled: bool


class FeatureFlagRolloutRequest(BaseModel):
    rollout: float = Field(ge=0.0, le=1.0)


class FeatureFlagResponse(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    name: str
    key: str
    description: str | None
    enabled: bool
    rollout: float
    targeting: dict[str, Any]
    variants: dict[str, Any]
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FeatureFlagListResponse(BaseModel):
    feature_flags: list[FeatureFlagResponse]
    total: int
