"""
FastAPI dependency injection functions.

Provides Redis connections, the current principal, the request-scoped
membership guard and organization context, and role enforcement.

FastAPI caches dependency results per request, so the principal, the guard
and its membership memo are resolved once no matter how many dependants
ask for them.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

import redis.asyncio as aioredis
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.config import settings
from prodmatic.core.database import get_db
from prodmatic.core.errors import AuthenticationError, NotFoundError
from prodmatic.core.permissions import MembershipGuard
from prodmatic.core.security import blacklist_redis_key, decode_access_token
from prodmatic.models.member import OrgMember, OrgRole
from prodmatic.models.organization import Organization
from prodmatic.models.user import User

# ---------------------------------------------------------------------------
# HTTP Bearer scheme (auto_error=False so we can return custom 401)
# ---------------------------------------------------------------------------

bearer_scheme = HTTPBearer(auto_error=False)

# ---------------------------------------------------------------------------
# Redis
# ---------------------------------------------------------------------------

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Return a shared async Redis client backed by a module-level pool."""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            str(settings.REDIS_URL),
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_pool


async def close_redis() -> None:
    global _redis_pool
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------

async def get_token_payload(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    redis: aioredis.Redis = Depends(get_redis),
) -> dict:
    """Decode the bearer access token and reject revoked ones."""
    if credentials is None:
        raise AuthenticationError("Authorization header required", code="MISSING_TOKEN")

    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError:
        raise AuthenticationError("Token is invalid or expired", code="INVALID_TOKEN")

    if await redis.exists(blacklist_redis_key(payload["jti"])):
        raise AuthenticationError("Token has been revoked", code="TOKEN_REVOKED")

    return payload


async def get_current_user(
    payload: dict = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the authenticated principal.

    Raises 401 if the token is missing, invalid, revoked, or the user does
    not exist or is inactive.
    """
    try:
        user_id = UUID(payload["sub"])
    except ValueError:
        raise AuthenticationError("Token subject is malformed", code="INVALID_TOKEN")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise AuthenticationError("User not found or inactive", code="USER_NOT_FOUND")

    return user


# ---------------------------------------------------------------------------
# Organization context + role enforcement
# ---------------------------------------------------------------------------

def get_guard(db: AsyncSession = Depends(get_db)) -> MembershipGuard:
    """Request-scoped guard; its membership memo is shared by every service."""
    return MembershipGuard(db)


@dataclass
class OrgContext:
    """The organization addressed by the request and the acting principal."""

    org: Organization
    user: User


async def get_org_context(
    slug: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> OrgContext:
    """
    Resolve a live organization by slug.

    Membership is not checked here: services call the guard with the minimum
    role of the operation they perform.
    """
    result = await db.execute(
        select(Organization).where(
            Organization.slug == slug,
            Organization.deleted_at.is_(None),
        )
    )
    org = result.scalar_one_or_none()

    if org is None:
        raise NotFoundError("Organization not found", code="ORG_NOT_FOUND")

    return OrgContext(org=org, user=current_user)


def require_role(minimum: OrgRole):
    """
    Dependency factory that enforces a minimum role on routes that do not
    delegate to a service.

    Usage:
        @router.get("/...")
        async def endpoint(
            member_ctx: tuple = Depends(require_role(OrgRole.stakeholder)),
        ):
            ctx, member = member_ctx
    """

    async def role_checker(
        ctx: OrgContext = Depends(get_org_context),
        guard: MembershipGuard = Depends(get_guard),
    ) -> tuple[OrgContext, OrgMember]:
        member = await guard.require_role(ctx.user.id, ctx.org.id, minimum)
        return ctx, member

    return role_checker
