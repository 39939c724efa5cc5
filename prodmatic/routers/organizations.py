"""
Organization endpoints.

Organizations, their members and pending invitations. Accepting an
invitation is the only route here that does not resolve an org by slug.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import (
    OrgContext,
    get_current_user,
    get_guard,
    get_org_context,
    get_redis,
)
from prodmatic.core.permissions import MembershipGuard
from prodmatic.models.user import User
from prodmatic.schemas.organization import (
    InvitationResponse,
    InvitationsListResponse,
    InviteRequest,
    MemberResponse,
    MemberRoleUpdateRequest,
    MembersListResponse,
    OrganizationCreateRequest,
    OrganizationListResponse,
    OrganizationResponse,
    OrganizationUpdateRequest,
)
from prodmatic.services.organization_service import OrganizationService

router = APIRouter()


def get_org_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> OrganizationService:
    """Dependency that constructs OrganizationService."""
    return OrganizationService(db=db, redis=redis, guard=guard)


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=OrganizationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new organization",
)
async def create_organization(
    data: OrganizationCreateRequest,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationResponse:
    """
    Create a new organization.

    - Slug is derived from the name when omitted and must be unique
    - The creator becomes its first admin
    """
    return await service.create_organization(data, current_user)


@router.get("", response_model=OrganizationListResponse, summary="List my organizations")
async def list_organizations(
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationListResponse:
    return await service.list_organizations(current_user)


@router.get("/{slug}", response_model=OrganizationResponse, summary="Get organization")
async def get_organization(
    ctx: OrgContext = Depends(get_org_context),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationResponse:
    return await service.get_organization(ctx)


@router.patch("/{slug}", response_model=OrganizationResponse, summary="Update organization")
async def update_organization(
    data: OrganizationUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationResponse:
    """Update name, slug or description. Requires admin."""
    return await service.update_organization(ctx, data)


@router.delete("/{slug}", status_code=status.HTTP_200_OK, summary="Delete organization")
async def delete_organization(
    ctx: OrgContext = Depends(get_org_context),
    service: OrganizationService = Depends(get_org_service),
) -> dict:
    """Soft-delete the organization. Requires admin."""
    await service.delete_organization(ctx)
    return {}


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

@router.get("/{slug}/members", response_model=MembersListResponse, summary="List members")
async def list_members(
    ctx: OrgContext = Depends(get_org_context),
    service: OrganizationService = Depends(get_org_service),
) -> MembersListResponse:
    return await service.list_members(ctx)


@router.patch(
    "/{slug}/members/{user_id}",
    response_model=MemberResponse,
    summary="Update a member's role",
)
async def update_member_role(
    user_id: UUID,
    data: MemberRoleUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: OrganizationService = Depends(get_org_service),
) -> MemberResponse:
    """
    Change a member's role. Requires admin.

    - Admins cannot change their own role
    - The last admin cannot be demoted
    """
    return await service.update_member_role(ctx, user_id, data.role)


@router.delete(
    "/{slug}/members/{user_id}",
    status_code=status.HTTP_200_OK,
    summary="Remove a member from the organization",
)
async def remove_member(
    user_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: OrganizationService = Depends(get_org_service),
) -> dict:
    """
    Remove a member from the organization. Requires admin.

    - Admins cannot remove themselves
    - The last admin cannot be removed
    """
    await service.remove_member(ctx, user_id)
    return {}


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------

@router.post(
    "/{slug}/invitations",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite a user to the organization",
)
async def invite_member(
    data: InviteRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: OrganizationService = Depends(get_org_service),
) -> InvitationResponse:
    """
    Send an invitation email. Requires admin.

    The invitation link is valid for 48 hours.
    """
    return await service.invite_member(ctx, data)


@router.get(
    "/{slug}/invitations",
    response_model=InvitationsListResponse,
    summary="List open invitations",
)
async def list_invitations(
    ctx: OrgContext = Depends(get_org_context),
    service: OrganizationService = Depends(get_org_service),
) -> InvitationsListResponse:
    return await service.list_invitations(ctx)


@router.delete(
    "/{slug}/invitations/{invitation_id}",
    status_code=status.HTTP_200_OK,
    summary="Revoke a pending invitation",
)
async def revoke_invitation(
    invitation_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: OrganizationService = Depends(get_org_service),
) -> dict:
    await service.revoke_invitation(ctx, invitation_id)
    return {}


@router.post(
    "/invitations/{token}/accept",
    response_model=OrganizationResponse,
    summary="Accept an invitation",
)
async def accept_invitation(
    token: str,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationResponse:
    """
    Accept an organization invitation.

    - User must be logged in with the same email the invitation was sent to
    - Token must not be expired or already used
    """
    return await service.accept_invitation(token, current_user)
