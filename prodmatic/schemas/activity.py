"""
Activity feed schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field


class ActivityResponse(BaseModel):
    """One audit entry."""

    id: UUID
    org_id: UUID
    actor_id: UUID
    action: str
    entity_type: str
    entity_id: UUID
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("metadata_", "metadata"),
    )
    created_at: datetime

    model_config = {"from_attributes": True}


class ActivityListResponse(BaseModel):
    activities: list[ActivityResponse]
    total: int
    skip: int
    limit: int
