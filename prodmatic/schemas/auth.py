"""
Authentication schemas.

Request/response models for register, login, token refresh, logout and profile.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from prodmatic.models.member import OrgRole


def _password_must_contain_number(v: str) -> str:
    if not any(c.isdigit() for c in v):
        raise ValueError("Password must contain at least one number")
    return v


# ---------------------------------------------------------------------------
# Register / Login
# ---------------------------------------------------------------------------

class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    display_name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)

    @field_validator("password")
    @classmethod
    def password_must_contain_number(cls, v: str) -> str:
        return _password_must_contain_number(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    """Response for register, login and token refresh."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Access token TTL in seconds")


# ---------------------------------------------------------------------------
# Refresh / Logout
# ---------------------------------------------------------------------------

class RefreshRequest(BaseModel):
    refresh_token: str


class LogoutRequest(BaseModel):
    refresh_token: str


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

class MembershipSummary(BaseModel):
    """One organization the current user belongs to."""

    org_id: UUID
    org_slug: str
    org_name: str
    role: OrgRole


class MeResponse(BaseModel):
    """Response for GET /auth/me: current user with org memberships."""

    id: UUID
    email: str
    display_name: str
    avatar_url: str | None
    is_active: bool
    created_at: datetime
    memberships: list[MembershipSummary] = []

    model_config = {"from_attributes": True}


class ProfileUpdateRequest(BaseModel):
    """Request body for PATCH /auth/me."""

    display_name: str | None = Field(default=None, min_length=2, max_length=100)
    avatar_url: str | None = Field(default=None, max_length=500)
