"""
Role hierarchy and membership guard.

admin > product_manager > contributor > stakeholder. Every guarded operation
names only its minimum role and is checked with `at_least`, so a higher role
always passes whatever a lower role passes.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.errors import UnauthorizedError
from prodmatic.models.member import OrgMember, OrgRole

logger = logging.getLogger(__name__)

ROLE_RANK: dict[OrgRole, int] = {
    OrgRole.stakeholder: 0,
    OrgRole.contributor: 1,
    OrgRole.product_manager: 2,
    OrgRole.admin: 3,
}


def at_least(role: OrgRole | str, minimum: OrgRole | str) -> bool:
    """True when `role` ranks at or above `minimum`."""
    return ROLE_RANK[OrgRole(role)] >= ROLE_RANK[OrgRole(minimum)]


class MembershipGuard:
    """
    Permits or denies operations based on a principal's membership.

    One guard lives for one request; membership lookups are memoized so
    repeated checks within the request hit the database once per organization.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._memberships: dict[tuple[UUID, UUID], OrgMember | None] = {}

    async def get_membership(self, user_id: UUID, org_id: UUID) -> OrgMember | None:
        key = (user_id, org_id)
        if key not in self._memberships:
            result = await self.db.execute(
                select(OrgMember).where(
                    OrgMember.org_id == org_id,
                    OrgMember.user_id == user_id,
                )
            )
            self._memberships[key] = result.scalar_one_or_none()
        return self._memberships[key]

    def forget(self, user_id: UUID, org_id: UUID) -> None:
        """Drop a memoized lookup after the membership itself changed."""
        self._memberships.pop((user_id, org_id), None)

    async def require_member(self, user_id: UUID, org_id: UUID) -> OrgMember:
        member = await self.get_membership(user_id, org_id)
        if member is None:
            logger.warning(
                "Access denied: not a member",
                extra={"actor_id": user_id, "org_id": org_id, "error_code": "NOT_A_MEMBER"},
            )
            raise UnauthorizedError(
                "You are not a member of this organization", code="NOT_A_MEMBER"
            )
        return member

    async def require_role(
        self, user_id: UUID, org_id: UUID, minimum: OrgRole
    ) -> OrgMember:
        """
        Return the membership when its role is at least `minimum`.

        Raises UnauthorizedError when no membership exists or the role is
        too low. Performs no writes.
        """
        member = await self.require_member(user_id, org_id)
        if not at_least(member.role, minimum):
            logger.warning(
                "Access denied: insufficient role",
                extra={
                    "actor_id": user_id,
                    "org_id": org_id,
                    "minimum_role": minimum.value,
                    "error_code": "INSUFFICIENT_ROLE",
                },
            )
            raise UnauthorizedError(
                f"Required role: {minimum.value} or higher", code="INSUFFICIENT_ROLE"
            )
        return member

    async def require_role_or_owner(
        self,
        user_id: UUID,
        org_id: UUID,
        minimum: OrgRole,
        owner_id: UUID | None,
    ) -> OrgMember:
        """Like require_role, but the entity's owner passes with any role."""
        member = await self.require_member(user_id, org_id)
        if owner_id is not None and owner_id == user_id:
            return member
        return await self.require_role(user_id, org_id, minimum)
