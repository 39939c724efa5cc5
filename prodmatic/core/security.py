"""
Security utilities.

Password hashing, JWT access/refresh tokens, Redis key helpers.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt as _bcrypt
from jose import JWTError, jwt

from prodmatic.core.config import settings


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a plaintext password using bcrypt (cost=12)."""
    password_bytes = password.encode("utf-8")[:72]
    return _bcrypt.hashpw(password_bytes, _bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    password_bytes = plain_password.encode("utf-8")[:72]
    return _bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))


# ---------------------------------------------------------------------------
# JWT tokens
# ---------------------------------------------------------------------------

def _encode(user_id: str, token_type: str, jti: str, lifetime: timedelta) -> str:
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": user_id,
        "jti": jti,
        "type": token_type,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user_id: str, jti: str | None = None) -> str:
    """Create a short-lived access token identifying the principal."""
    return _encode(
        user_id,
        "access",
        jti or str(uuid.uuid4()),
        timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(user_id: str) -> tuple[str, str]:
    """
    Create a long-lived refresh token.

    Returns:
        Tuple of (encoded_token, jti) so the jti can be stored in Redis.
    """
    jti = str(uuid.uuid4())
    token = _encode(
        user_id,
        "refresh",
        jti,
        timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS),
    )
    return token, jti


def decode_token(token: str, expected_type: str) -> dict[str, Any]:
    """
    Decode and validate a JWT of the given type.

    Raises:
        JWTError: If the token is invalid, expired, tampered or of another type.
    """
    payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if payload.get("type") != expected_type:
        raise JWTError(f"Not an {expected_type} token")
    if not payload.get("sub") or not payload.get("jti"):
        raise JWTError("Token is missing subject or id")
    return payload


def decode_access_token(token: str) -> dict[str, Any]:
    return decode_token(token, "access")


def decode_refresh_token(token: str) -> dict[str, Any]:
    return decode_token(token, "refresh")


# ---------------------------------------------------------------------------
# Redis key helpers
# ---------------------------------------------------------------------------

def refresh_token_redis_key(user_id: str, jti: str) -> str:
    """Format: refresh:{user_id}:{jti}"""
    return f"refresh:{user_id}:{jti}"


def blacklist_redis_key(jti: str) -> str:
    """Format: blacklist:{jti}"""
    return f"blacklist:{jti}"
