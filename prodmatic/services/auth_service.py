"""
Authentication business logic.

Handles user registration, login, token refresh, logout and the profile.
All business logic lives here; routers only handle HTTP concerns.
"""

from __future__ import annotations

import logging
from uuid import UUID

import redis.asyncio as aioredis
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.config import settings
from prodmatic.core.errors import AuthenticationError, ConflictError, UnauthorizedError
from prodmatic.core.security import (
    blacklist_redis_key,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    refresh_token_redis_key,
    verify_password,
)
from prodmatic.models.member import OrgMember
from prodmatic.models.organization import Organization
from prodmatic.models.user import User
from prodmatic.schemas.auth import (
    LoginRequest,
    MembershipSummary,
    MeResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    TokenResponse,
)

logger = logging.getLogger(__name__)


class AuthService:
    """Handles all authentication operations."""

    def __init__(self, db: AsyncSession, redis: aioredis.Redis) -> None:
        self.db = db
        self.redis = redis

    # -----------------------------------------------------------------------
    # Register
    # -----------------------------------------------------------------------

    async def register(self, data: RegisterRequest) -> TokenResponse:
        """
        Register a new user.

        - Validates email uniqueness
        - Hashes password
        - Creates user record
        - Issues JWT tokens
        """
        email = data.email.lower()
        existing = await self.db.scalar(select(User.id).where(User.email == email))
        if existing is not None:
            raise ConflictError(
                "Email is already registered", code="EMAIL_TAKEN", field="email"
            )

        user = User(
            email=email,
            password_hash=hash_password(data.password),
            display_name=data.display_name,
        )
        self.db.add(user)
        await self.db.flush()

        logger.info("User registered", extra={"actor_id": user.id})
        return await self._issue_tokens(user)

    # -----------------------------------------------------------------------
    # Login
    # -----------------------------------------------------------------------

    async def login(self, data: LoginRequest) -> TokenResponse:
        """
        Authenticate user with email + password.

        Raises 401 for invalid credentials (never reveals which field is wrong).
        """
        user = await self.db.scalar(select(User).where(User.email == data.email.lower()))

        if user is None or not verify_password(data.password, user.password_hash):
            raise AuthenticationError(
                "Invalid email or password", code="INVALID_CREDENTIALS"
            )

        if not user.is_active:
            raise UnauthorizedError("Account is disabled", code="ACCOUNT_DISABLED")

        return await self._issue_tokens(user)

    # -----------------------------------------------------------------------
    # Refresh
    # -----------------------------------------------------------------------

    async def refresh(self, refresh_token: str) -> TokenResponse:
        """
        Exchange a valid refresh token for a new token pair.

        - Validates refresh token JWT
        - Checks token exists in Redis
        - Rotates: deletes old refresh token, issues new pair
        """
        try:
            payload = decode_refresh_token(refresh_token)
        except JWTError:
            raise AuthenticationError(
                "Refresh token is invalid or expired", code="INVALID_TOKEN"
            )

        user_id: str = payload["sub"]
        redis_key = refresh_token_redis_key(user_id, payload["jti"])
        if not await self.redis.exists(redis_key):
            raise AuthenticationError(
                "Refresh token has been revoked", code="TOKEN_REVOKED"
            )

        user = await self.db.scalar(select(User).where(User.id == UUID(user_id)))
        if user is None or not user.is_active:
            raise AuthenticationError("User not found or inactive", code="USER_NOT_FOUND")

        await self.redis.delete(redis_key)
        return await self._issue_tokens(user)

    # -----------------------------------------------------------------------
    # Logout
    # -----------------------------------------------------------------------

    async def logout(self, access_token_jti: str, refresh_token: str) -> None:
        """
        Logout user by:
        - Blacklisting the access token JTI
        - Deleting the refresh token from Redis
        """
        await self.redis.setex(
            blacklist_redis_key(access_token_jti),
            settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            "1",
        )

        try:
            payload = decode_refresh_token(refresh_token)
        except JWTError:
            # already expired refresh tokens have nothing left to delete
            return
        await self.redis.delete(refresh_token_redis_key(payload["sub"], payload["jti"]))

    # -----------------------------------------------------------------------
    # Profile
    # -----------------------------------------------------------------------

    async def get_me(self, user: User) -> MeResponse:
        """Return current user profile with the organizations they belong to."""
        result = await self.db.execute(
            select(OrgMember, Organization)
            .join(Organization, OrgMember.org_id == Organization.id)
            .where(OrgMember.user_id == user.id, Organization.deleted_at.is_(None))
            .order_by(Organization.name)
        )
        memberships = [
            MembershipSummary(
                org_id=org.id, org_slug=org.slug, org_name=org.name, role=member.role
            )
            for member, org in result.all()
        ]
        return MeResponse.model_validate(user).model_copy(
            update={"memberships": memberships}
        )

    async def update_me(self, user: User, data: ProfileUpdateRequest) -> MeResponse:
        changes = data.model_dump(exclude_unset=True)
        if "display_name" in changes and changes["display_name"] is not None:
            user.display_name = changes["display_name"]
        if "avatar_url" in changes:
            user.avatar_url = changes["avatar_url"]
        await self.db.flush()
        await self.db.refresh(user)
        return await self.get_me(user)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    async def _issue_tokens(self, user: User) -> TokenResponse:
        """Create an access + refresh pair and store the refresh JTI in Redis."""
        user_id = str(user.id)

        refresh_token, refresh_jti = create_refresh_token(user_id)
        access_token = create_access_token(user_id)

        ttl_seconds = settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60
        await self.redis.setex(refresh_token_redis_key(user_id, refresh_jti), ttl_seconds, "1")

        return TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )
