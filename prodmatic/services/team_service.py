"""
Team business logic.

Teams group members of one organization. Only users who already belong to
the organization can join a team; leaving the organization removes them
from its teams. Team slugs are unique among the organization's live teams.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import delete, select

from prodmatic.core.dependencies import OrgContext
from prodmatic.core.errors import ConflictError, NotFoundError, ValidationError
from prodmatic.models.member import OrgMember, OrgRole
from prodmatic.models.team import Team, TeamMember
from prodmatic.models.user import User
from prodmatic.schemas.team import (
    TeamMemberAddRequest,
    TeamMemberResponse,
    TeamResponse,
)
from prodmatic.services.entity_service import EntityService
from prodmatic.services.organization_service import slugify

TEAMS_VIEW = "teams"


class TeamService(EntityService[Team]):
    """Handles teams and their membership."""

    model = Team
    entity_type = "TEAM"
    response_schema = TeamResponse
    parent_model = None
    parent_field = None
    label_field = "name"

    create_role = OrgRole.product_manager
    update_role = OrgRole.product_manager
    delete_role = OrgRole.admin

    def views_for(self, entity: Team) -> set[str]:
        return {TEAMS_VIEW}

    def describe(self, entity: Team) -> dict[str, Any]:
        return {"name": entity.name, "slug": entity.slug}

    async def validate_values(
        self, ctx: OrgContext, values: dict[str, Any], entity: Team | None
    ) -> None:
        if entity is None and values.get("slug") is None:
            values["slug"] = slugify(values["name"])
            if len(values["slug"]) < 2:
                raise ValidationError(
                    "Could not derive a slug from the name, please provide one",
                    field="slug",
                )

        slug = values.get("slug")
        if slug is None or (entity is not None and slug == entity.slug):
            return
        existing = await self.db.scalar(
            select(Team.id).where(
                Team.org_id == ctx.org.id, Team.slug == slug, Team.deleted_at.is_(None)
            )
        )
        if existing is not None:
            raise ConflictError(
                f"Team slug {slug} is already in use", code="TEAM_SLUG_TAKEN", field="slug"
            )

    async def on_delete(self, ctx: OrgContext, entity: Team) -> None:
        await self.db.execute(delete(TeamMember).where(TeamMember.team_id == entity.id))

    async def list_teams(self, ctx: OrgContext) -> list[TeamResponse]:
        await self.authorize(ctx, self.read_role)

        cached = await self.cache.get(ctx.org.id, TEAMS_VIEW)
        if cached is not None:
            return [TeamResponse.model_validate(item) for item in cached]

        result = await self.db.execute(
            self.scoped().where(Team.org_id == ctx.org.id).order_by(Team.name)
        )
        teams = [TeamResponse.model_validate(t) for t in result.scalars()]
        await self.cache.set(ctx.org.id, TEAMS_VIEW, [t.model_dump(mode="json") for t in teams])
        return teams

    # -----------------------------------------------------------------------
    # Members
    # -----------------------------------------------------------------------

    async def list_members(self, ctx: OrgContext, team_id: UUID) -> list[TeamMemberResponse]:
        await self.authorize(ctx, self.read_role)
        team = await self.load(ctx, team_id)
        result = await self.db.execute(
            select(TeamMember, User)
            .join(User, TeamMember.user_id == User.id)
            .where(TeamMember.team_id == team.id)
            .order_by(TeamMember.joined_at)
        )
        return [_team_member_response(member, user) for member, user in result.all()]

    async def _load_member(self, team: Team, user_id: UUID) -> tuple[TeamMember, User]:
        result = await self.db.execute(
            select(TeamMember, User)
            .join(User, TeamMember.user_id == User.id)
            .where(TeamMember.team_id == team.id, TeamMember.user_id == user_id)
        )
        row = result.one_or_none()
        if row is None:
            raise NotFoundError("Team member not found", code="TEAM_MEMBER_NOT_FOUND")
        return row[0], row[1]

    async def add_member(
        self, ctx: OrgContext, team_id: UUID, data: TeamMemberAddRequest
    ) -> TeamMemberResponse:
        """
        Add an organization member to a team.

        - The user must belong to the organization
        - A user is on a team at most once
        """
        team = await self.load_authorized(ctx, team_id, OrgRole.product_manager)

        in_org = await self.db.scalar(
            select(OrgMember.id).where(
                OrgMember.org_id == ctx.org.id, OrgMember.user_id == data.user_id
            )
        )
        if in_org is None:
            raise ValidationError(
                "User is not a member of this organization",
                code="NOT_ORG_MEMBER",
                field="user_id",
            )
        existing = await self.db.scalar(
            select(TeamMember.id).where(
                TeamMember.team_id == team.id, TeamMember.user_id == data.user_id
            )
        )
        if existing is not None:
            raise ConflictError(
                "User is already on this team", code="ALREADY_TEAM_MEMBER", field="user_id"
            )

        member = TeamMember(
            org_id=ctx.org.id, team_id=team.id, user_id=data.user_id, role=data.role
        )
        self.db.add(member)
        await self.db.flush()
        await self.db.refresh(member)
        user = await self.db.get(User, data.user_id)

        await self.record(
            ctx, "MEMBER_ADDED", team, {"user_id": user.id, "email": user.email, "role": member.role}
        )
        await self.commit(ctx, ())
        return _team_member_response(member, user)

    async def update_member_role(
        self, ctx: OrgContext, team_id: UUID, user_id: UUID, role: OrgRole
    ) -> TeamMemberResponse:
        team = await self.load_authorized(ctx, team_id, OrgRole.product_manager)
        member, user = await self._load_member(team, user_id)
        old_role = member.role
        member.role = role
        await self.db.flush()

        await self.record(
            ctx, "MEMBER_ROLE_CHANGED", team, {"user_id": user.id, "from": old_role, "to": role}
        )
        await self.commit(ctx, ())
        return _team_member_response(member, user)

    async def remove_member(self, ctx: OrgContext, team_id: UUID, user_id: UUID) -> None:
        team = await self.load_authorized(ctx, team_id, OrgRole.product_manager)
        member, user = await self._load_member(team, user_id)
        role = member.role
        await self.db.delete(member)
        await self.db.flush()

        await self.record(
            ctx, "MEMBER_REMOVED", team, {"user_id": user.id, "email": user.email, "role": role}
        )
        await self.commit(ctx, ())


def _team_member_response(member: TeamMember, user: User) -> TeamMemberResponse:
    return TeamMemberResponse(
        id=member.id,
        team_id=member.team_id,
        user_id=member.user_id,
        email=user.email,
        display_name=user.display_name,
        role=member.role,
        joined_at=member.joined_at,
    )
