"""
Organization schemas.

Request/response models for organization, member and invitation endpoints.
"""

from __future__ import annotations

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from prodmatic.models.member import OrgRole

SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$")


def _check_slug(v: str | None) -> str | None:
    if v is not None and not SLUG_PATTERN.match(v):
        raise ValueError(
            "Slug must be lowercase alphanumeric and hyphens only, "
            "and cannot start or end with a hyphen"
        )
    return v


# ---------------------------------------------------------------------------
# Organization
# ---------------------------------------------------------------------------

class OrganizationCreateRequest(BaseModel):
    """Request body for POST /organizations. Slug is derived from the name when omitted."""

    name: str = Field(min_length=2, max_length=100)
    slug: str | None = Field(default=None, min_length=3, max_length=50)
    description: str | None = Field(default=None, max_length=2000)

    @field_validator("slug")
    @classmethod
    def slug_must_be_valid(cls, v: str | None) -> str | None:
        return _check_slug(v)


class OrganizationUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    slug: str | None = Field(default=None, min_length=3, max_length=50)
    description: str | None = Field(default=None, max_length=2000)

    @field_validator("slug")
    @classmethod
    def slug_must_be_valid(cls, v: str | None) -> str | None:
        return _check_slug(v)


class OrganizationResponse(BaseModel):
    id: UUID
    name: str
    slug: str
    description: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrganizationListResponse(BaseModel):
    organizations: list[OrganizationResponse]
    total: int


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

class MemberResponse(BaseModel):
    """Single org member with user info and role."""

    id: UUID
    user_id: UUID
    email: str
    display_name: str
    avatar_url: str | None
    role: OrgRole
    joined_at: datetime


class MembersListResponse(BaseModel):
    members: list[MemberResponse]
    total: int


class MemberRoleUpdateRequest(BaseModel):
    """Request body for PATCH /organizations/{slug}/members/{user_id}."""

    role: OrgRole


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------

class InviteRequest(BaseModel):
    """Request body for POST /organizations/{slug}/invitations."""

    email: EmailStr
    role: OrgRole = OrgRole.contributor


class InvitationResponse(BaseModel):
    id: UUID
    org_id: UUID
    email: str
    role: OrgRole
    token: str
    expires_at: datetime
    accepted_at: datetime | None = None
    created_at: datetime
    is_expired: bool = False

    model_config = {"from_attributes": True}


class InvitationsListResponse(BaseModel):
    invitations: list[InvitationResponse]
    total: int
