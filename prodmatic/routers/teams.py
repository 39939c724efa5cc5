"""
Team endpoints.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import OrgContext, get_guard, get_org_context, get_redis
from prodmatic.core.permissions import MembershipGuard
from prodmatic.schemas.team import (
    TeamCreateRequest,
    TeamListResponse,
    TeamMemberAddRequest,
    TeamMemberResponse,
    TeamMemberRoleUpdateRequest,
    TeamMembersListResponse,
    TeamResponse,
    TeamUpdateRequest,
)
from prodmatic.services.team_service import TeamService

router = APIRouter()


def get_team_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> TeamService:
    return TeamService(db=db, redis=redis, guard=guard)


@router.get("/organizations/{slug}/teams", response_model=TeamListResponse, summary="List teams")
async def list_teams(
    ctx: OrgContext = Depends(get_org_context),
    service: TeamService = Depends(get_team_service),
) -> TeamListResponse:
    teams = await service.list_teams(ctx)
    return TeamListResponse(teams=teams, total=len(teams))


@router.post(
    "/organizations/{slug}/teams",
    response_model=TeamResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a team",
)
async def create_team(
    data: TeamCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: TeamService = Depends(get_team_service),
) -> TeamResponse:
    """Requires product manager. Slugs are unique among the organization's teams."""
    return await service.create(ctx, data)


@router.get("/organizations/{slug}/teams/{team_id}", response_model=TeamResponse)
async def get_team(
    team_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: TeamService = Depends(get_team_service),
) -> TeamResponse:
    return await service.get(ctx, team_id)


@router.patch("/organizations/{slug}/teams/{team_id}", response_model=TeamResponse)
async def update_team(
    team_id: UUID,
    data: TeamUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: TeamService = Depends(get_team_service),
) -> TeamResponse:
    return await service.update(ctx, team_id, data)


@router.delete("/organizations/{slug}/teams/{team_id}", status_code=status.HTTP_200_OK)
async def delete_team(
    team_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: TeamService = Depends(get_team_service),
) -> dict:
    """Requires admin. The team's memberships are removed with it."""
    await service.delete(ctx, team_id)
    return {}


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

@router.get(
    "/organizations/{slug}/teams/{team_id}/members", response_model=TeamMembersListResponse
)
async def list_team_members(
    team_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: TeamService = Depends(get_team_service),
) -> TeamMembersListResponse:
    members = await service.list_members(ctx, team_id)
    return TeamMembersListResponse(members=members, total=len(members))


@router.post(
    "/organizations/{slug}/teams/{team_id}/members",
    response_model=TeamMemberResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_team_member(
    team_id: UUID,
    data: TeamMemberAddRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: TeamService = Depends(get_team_service),
) -> TeamMemberResponse:
    """The user must already be a member of the organization."""
    return await service.add_member(ctx, team_id, data)


@router.patch(
    "/organizations/{slug}/teams/{team_id}/members/{user_id}",
    response_model=TeamMemberResponse,
)
async def update_team_member_role(
    team_id: UUID,
    user_id: UUID,
    data: TeamMemberRoleUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: TeamService = Depends(get_team_service),
) -> TeamMemberResponse:
    return await service.update_member_role(ctx, team_id, user_id, data.role)


@router.delete(
    "/organizations/{slug}/teams/{team_id}/members/{user_id}",
    status_code=status.HTTP_200_OK,
)
async def remove_team_member(
    team_id: UUID,
    user_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: TeamService = Depends(get_team_service),
) -> dict:
    await service.remove_member(ctx, team_id, user_id)
    return {}
