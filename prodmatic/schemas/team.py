"""
Team schemas.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from prodmatic.models.member import OrgRole
from prodmatic.schemas.organization import _check_slug


class TeamCreateRequest(BaseModel):
    """Slug is derived from the name when omitted."""

    name: str = Field(min_length=1, max_length=100)
    slug: str | None = Field(default=None, min_length=2, max_length=50)
    description: str | None = Field(default=None, max_length=2000)

    @field_validator("slug")
    @classmethod
    def slug_must_be_valid(cls, v: str | None) -> str | None:
        return _check_slug(v)


class TeamUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    slug: str | None = Field(default=None, min_length=2, max_length=50)
    description: str | None = Field(default=None, max_length=2000)

    @field_validator("slug")
    @classmethod
    def slug_must_be_valid(cls, v: str | None) -> str | None:
        return _check_slug(v)


class TeamResponse(BaseModel):
    id: UUID
    org_id: UUID
    name: str
    slug: str
    description: str | None
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TeamListResponse(BaseModel):
    teams: list[TeamResponse]
    total: int


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

class TeamMemberAddRequest(BaseModel):
    user_id: UUID
    role: OrgRole = OrgRole.contributor


class TeamMemberRoleUpdateRequest(BaseModel):
    role: OrgRole


class TeamMemberResponse(BaseModel):
    id: UUID
    team_id: UUID
    user_id: UUID
    email: str
    display_name: str
    role: OrgRole
    joined_at: datetime


class TeamMembersListResponse(BaseModel):
    members: list[TeamMemberResponse]
    total: int
