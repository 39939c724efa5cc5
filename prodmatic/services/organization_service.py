"""
Organization business logic.

Handles org creation, member management, invitations.
All queries scoped by org_id; every mutation is audited in the same
transaction as the change itself.
"""

from __future__ import annotations

import logging
import re
import secrets
from datetime import timedelta
from uuid import UUID

import redis.asyncio as aioredis
from fastapi import status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.config import settings
from prodmatic.core.dependencies import OrgContext
from prodmatic.core.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from prodmatic.core.permissions import MembershipGuard
from prodmatic.models.base import as_utc, utcnow
from prodmatic.models.invitation import Invitation
from prodmatic.models.member import OrgMember, OrgRole
from prodmatic.models.organization import Organization
from prodmatic.models.team import TeamMember
from prodmatic.models.user import User
from prodmatic.schemas.organization import (
    InvitationResponse,
    InvitationsListResponse,
    InviteRequest,
    MemberResponse,
    MembersListResponse,
    OrganizationCreateRequest,
    OrganizationListResponse,
    OrganizationResponse,
    OrganizationUpdateRequest,
)
from prodmatic.services.activity_service import ActivityRecorder

logger = logging.getLogger(__name__)

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Lowercase the name and collapse everything else into single hyphens."""
    return _NON_SLUG_CHARS.sub("-", name.lower()).strip("-")[:50].rstrip("-")


class OrganizationService:
    """Handles all organization operations."""

    def __init__(
        self,
        db: AsyncSession,
        redis: aioredis.Redis,
        guard: MembershipGuard | None = None,
    ) -> None:
        self.db = db
        self.redis = redis
        self.guard = guard or MembershipGuard(db)
        self.activity = ActivityRecorder(db)

    async def _slug_taken(self, slug: str) -> bool:
        # deleted organizations keep their slug
        existing = await self.db.scalar(
            select(Organization.id).where(Organization.slug == slug)
        )
        return existing is not None

    # -----------------------------------------------------------------------
    # Create Organization
    # -----------------------------------------------------------------------

    async def create_organization(
        self, data: OrganizationCreateRequest, creator: User
    ) -> OrganizationResponse:
        """
        Create a new organization.

        - Derives the slug from the name when none is given
        - Validates slug uniqueness
        - Assigns creator as admin
        """
        slug = data.slug or slugify(data.name)
        if len(slug) < 3:
            raise ValidationError(
                "Could not derive a slug from the name, please provide one",
                field="slug",
            )
        if await self._slug_taken(slug):
            raise ConflictError(
                "Organization slug is already taken", code="SLUG_TAKEN", field="slug"
            )

        org = Organization(name=data.name, slug=slug, description=data.description)
        self.db.add(org)
        await self.db.flush()

        self.db.add(OrgMember(org_id=org.id, user_id=creator.id, role=OrgRole.admin))
        await self.db.flush()

        await self.activity.log_activity(
            actor_id=creator.id,
            org_id=org.id,
            action="ORGANIZATION_CREATED",
            entity_type="ORGANIZATION",
            entity_id=org.id,
            metadata={"name": org.name, "slug": org.slug},
        )
        await self.db.commit()
        return OrganizationResponse.model_validate(org)

    # -----------------------------------------------------------------------
    # List / Get / Update / Delete
    # -----------------------------------------------------------------------

    async def list_organizations(self, user: User) -> OrganizationListResponse:
        """Organizations the user belongs to."""
        result = await self.db.execute(
            select(Organization)
            .join(OrgMember, OrgMember.org_id == Organization.id)
            .where(OrgMember.user_id == user.id, Organization.deleted_at.is_(None))
            .order_by(Organization.name)
        )
        orgs = [OrganizationResponse.model_validate(o) for o in result.scalars()]
        return OrganizationListResponse(organizations=orgs, total=len(orgs))

    async def get_organization(self, ctx: OrgContext) -> OrganizationResponse:
        await self.guard.require_member(ctx.user.id, ctx.org.id)
        return OrganizationResponse.model_validate(ctx.org)

    async def update_organization(
        self, ctx: OrgContext, data: OrganizationUpdateRequest
    ) -> OrganizationResponse:
        await self.guard.require_role(ctx.user.id, ctx.org.id, OrgRole.admin)
        org = ctx.org
        changes = data.model_dump(exclude_unset=True)

        if changes.get("slug") is not None and changes["slug"] != org.slug:
            if await self._slug_taken(changes["slug"]):
                raise ConflictError(
                    "Organization slug is already taken", code="SLUG_TAKEN", field="slug"
                )
        for field in ("name", "slug"):
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be null", field=field)

        diff = {}
        for field, value in changes.items():
            old = getattr(org, field)
            if old != value:
                setattr(org, field, value)
                diff[field] = {"old": old, "new": value}
        await self.db.flush()
        await self.db.refresh(org)

        await self.activity.log_activity(
            actor_id=ctx.user.id,
            org_id=org.id,
            action="ORGANIZATION_UPDATED",
            entity_type="ORGANIZATION",
            entity_id=org.id,
            metadata={"changes": diff},
        )
        await self.db.commit()
        return OrganizationResponse.model_validate(org)

    async def delete_organization(self, ctx: OrgContext) -> None:
        await self.guard.require_role(ctx.user.id, ctx.org.id, OrgRole.admin)
        ctx.org.deleted_at = utcnow()
        await self.activity.log_activity(
            actor_id=ctx.user.id,
            org_id=ctx.org.id,
            action="ORGANIZATION_DELETED",
            entity_type="ORGANIZATION",
            entity_id=ctx.org.id,
            metadata={"name": ctx.org.name, "slug": ctx.org.slug},
        )
        await self.db.commit()

    # -----------------------------------------------------------------------
    # Members
    # -----------------------------------------------------------------------

    async def list_members(self, ctx: OrgContext) -> MembersListResponse:
        """List all members of an organization with user details."""
        await self.guard.require_member(ctx.user.id, ctx.org.id)
        result = await self.db.execute(
            select(OrgMember, User)
            .join(User, OrgMember.user_id == User.id)
            .where(OrgMember.org_id == ctx.org.id)
            .order_by(OrgMember.joined_at)
        )
        members = [_member_response(member, user) for member, user in result.all()]
        return MembersListResponse(members=members, total=len(members))

    async def _load_member(self, org_id: UUID, user_id: UUID) -> tuple[OrgMember, User]:
        result = await self.db.execute(
            select(OrgMember, User)
            .join(User, OrgMember.user_id == User.id)
            .where(OrgMember.org_id == org_id, OrgMember.user_id == user_id)
        )
        row = result.one_or_none()
        if row is None:
            raise NotFoundError("Member not found", code="MEMBER_NOT_FOUND")
        return row[0], row[1]

    async def _ensure_not_last_admin(self, member: OrgMember) -> None:
        if member.role != OrgRole.admin:
            return
        admins = await self.db.scalar(
            select(func.count()).select_from(OrgMember).where(
                OrgMember.org_id == member.org_id,
                OrgMember.role == OrgRole.admin,
            )
        )
        if admins <= 1:
            raise ConflictError(
                "An organization needs at least one admin", code="LAST_ADMIN"
            )

    async def update_member_role(
        self, ctx: OrgContext, target_user_id: UUID, new_role: OrgRole
    ) -> MemberResponse:
        """
        Change a member's role.

        - Admins cannot change their own role
        - The last admin cannot be demoted
        """
        await self.guard.require_role(ctx.user.id, ctx.org.id, OrgRole.admin)
        if target_user_id == ctx.user.id:
            raise ValidationError(
                "You cannot change your own role", code="CANNOT_CHANGE_OWN_ROLE"
            )

        member, user = await self._load_member(ctx.org.id, target_user_id)
        old_role = member.role
        if new_role != OrgRole.admin:
            await self._ensure_not_last_admin(member)

        member.role = new_role
        await self.db.flush()
        self.guard.forget(target_user_id, ctx.org.id)

        await self.activity.log_activity(
            actor_id=ctx.user.id,
            org_id=ctx.org.id,
            action="MEMBER_ROLE_CHANGED",
            entity_type="MEMBER",
            entity_id=member.id,
            metadata={"user_id": user.id, "from": old_role, "to": new_role},
        )
        await self.db.commit()
        return _member_response(member, user)

    async def remove_member(self, ctx: OrgContext, target_user_id: UUID) -> None:
        await self.guard.require_role(ctx.user.id, ctx.org.id, OrgRole.admin)
        if target_user_id == ctx.user.id:
            raise ValidationError(
                "You cannot remove yourself from the organization",
                code="CANNOT_REMOVE_SELF",
            )

        member, user = await self._load_member(ctx.org.id, target_user_id)
        await self._ensure_not_last_admin(member)

        member_id = member.id
        await self.db.delete(member)
        await self.db.execute(
            delete(TeamMember).where(
                TeamMember.org_id == ctx.org.id, TeamMember.user_id == target_user_id
            )
        )
        await self.db.flush()
        self.guard.forget(target_user_id, ctx.org.id)

        await self.activity.log_activity(
            actor_id=ctx.user.id,
            org_id=ctx.org.id,
            action="MEMBER_REMOVED",
            entity_type="MEMBER",
            entity_id=member_id,
            metadata={"user_id": user.id, "email": user.email, "role": member.role},
        )
        await self.db.commit()

    # -----------------------------------------------------------------------
    # Invitations
    # -----------------------------------------------------------------------

    async def invite_member(
        self, ctx: OrgContext, data: InviteRequest
    ) -> InvitationResponse:
        """
        Create an invitation for a new member.

        - Rejects existing members and pending invitations
        - Creates invitation record with secure token
        - Queues invitation email via Celery after commit
        """
        await self.guard.require_role(ctx.user.id, ctx.org.id, OrgRole.admin)
        email = data.email.lower()

        pending = await self.db.scalar(
            select(Invitation.id).where(
                Invitation.org_id == ctx.org.id,
                Invitation.email == email,
                Invitation.accepted_at.is_(None),
                Invitation.expires_at > utcnow(),
            )
        )
        if pending is not None:
            raise ConflictError(
                "A pending invitation already exists for this email",
                code="INVITE_EXISTS",
                field="email",
            )

        existing_member = await self.db.scalar(
            select(OrgMember.id)
            .join(User, OrgMember.user_id == User.id)
            .where(OrgMember.org_id == ctx.org.id, User.email == email)
        )
        if existing_member is not None:
            raise ConflictError(
                "User is already a member of this organization",
                code="ALREADY_MEMBER",
                field="email",
            )

        invitation = Invitation(
            org_id=ctx.org.id,
            email=email,
            role=data.role,
            token=secrets.token_urlsafe(32),
            expires_at=utcnow() + timedelta(hours=settings.INVITATION_TTL_HOURS),
            created_by=ctx.user.id,
        )
        self.db.add(invitation)
        await self.db.flush()

        await self.activity.log_activity(
            actor_id=ctx.user.id,
            org_id=ctx.org.id,
            action="MEMBER_INVITED",
            entity_type="INVITATION",
            entity_id=invitation.id,
            metadata={"email": email, "role": data.role},
        )
        await self.db.commit()

        from prodmatic.workers.email_tasks import send_invitation_email

        send_invitation_email.delay(
            to_email=email,
            org_name=ctx.org.name,
            org_slug=ctx.org.slug,
            inviter_name=ctx.user.display_name,
            role=data.role.value,
            invitation_token=invitation.token,
            frontend_url=settings.FRONTEND_URL,
        )
        return _invitation_response(invitation)

    async def list_invitations(self, ctx: OrgContext) -> InvitationsListResponse:
        """Invitations that have not been accepted yet, expired ones included."""
        await self.guard.require_role(ctx.user.id, ctx.org.id, OrgRole.admin)
        result = await self.db.execute(
            select(Invitation)
            .where(Invitation.org_id == ctx.org.id, Invitation.accepted_at.is_(None))
            .order_by(Invitation.created_at.desc())
        )
        invitations = [_invitation_response(i) for i in result.scalars()]
        return InvitationsListResponse(invitations=invitations, total=len(invitations))

    async def revoke_invitation(self, ctx: OrgContext, invitation_id: UUID) -> None:
        await self.guard.require_role(ctx.user.id, ctx.org.id, OrgRole.admin)
        invitation = await self.db.scalar(
            select(Invitation).where(
                Invitation.id == invitation_id,
                Invitation.org_id == ctx.org.id,
            )
        )
        if invitation is None:
            raise NotFoundError("Invitation not found", code="INVITE_NOT_FOUND")

        await self.db.delete(invitation)
        await self.db.flush()
        await self.activity.log_activity(
            actor_id=ctx.user.id,
            org_id=ctx.org.id,
            action="INVITATION_REVOKED",
            entity_type="INVITATION",
            entity_id=invitation_id,
            metadata={"email": invitation.email},
        )
        await self.db.commit()

    async def accept_invitation(self, token: str, current_user: User) -> OrganizationResponse:
        """
        Accept an invitation.

        - Validates token exists, is unused and not expired
        - Verifies user email matches invitation email
        - Adds user as org member with the invited role
        """
        invitation = await self.db.scalar(
            select(Invitation).where(Invitation.token == token)
        )
        if invitation is None:
            raise NotFoundError("Invitation not found", code="INVITE_NOT_FOUND")

        if invitation.accepted_at is not None:
            raise ValidationError(
                "Invitation has already been accepted",
                code="INVITE_USED",
                status_code=status.HTTP_400_BAD_REQUEST,
            )
        if as_utc(invitation.expires_at) < utcnow():
            raise ValidationError(
                "Invitation has expired",
                code="INVITE_EXPIRED",
                status_code=status.HTTP_400_BAD_REQUEST,
            )
        if invitation.email != current_user.email.lower():
            raise UnauthorizedError(
                "Invitation was sent to a different email address",
                code="EMAIL_MISMATCH",
            )

        org = await self.db.scalar(
            select(Organization).where(
                Organization.id == invitation.org_id,
                Organization.deleted_at.is_(None),
            )
        )
        if org is None:
            raise NotFoundError("Organization not found", code="ORG_NOT_FOUND")

        if await self.guard.get_membership(current_user.id, org.id) is not None:
            raise ConflictError(
                "You are already a member of this organization", code="ALREADY_MEMBER"
            )

        member = OrgMember(org_id=org.id, user_id=current_user.id, role=invitation.role)
        self.db.add(member)
        invitation.accepted_at = utcnow()
        await self.db.flush()
        self.guard.forget(current_user.id, org.id)

        await self.activity.log_activity(
            actor_id=current_user.id,
            org_id=org.id,
            action="MEMBER_JOINED",
            entity_type="MEMBER",
            entity_id=member.id,
            metadata={"invitation_id": invitation.id, "role": member.role},
        )
        await self.db.commit()
        return OrganizationResponse.model_validate(org)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _member_response(member: OrgMember, user: User) -> MemberResponse:
    return MemberResponse(
        id=member.id,
        user_id=member.user_id,
        email=user.email,
        display_name=user.display_name,
        avatar_url=user.avatar_url,
        role=member.role,
        joined_at=member.joined_at,
    )


def _invitation_response(invitation: Invitation) -> InvitationResponse:
    response = InvitationResponse.model_validate(invitation)
    response.is_expired = as_utc(invitation.expires_at) < utcnow()
    return response
