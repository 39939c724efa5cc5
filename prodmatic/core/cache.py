"""
View cache and revalidation signal.

Rendered list views are cached per organization under
view:{org_id}:{path}. After a mutation commits, the views that depend on the
changed entity are deleted and the paths are published on the revalidation
channel so other processes (SSR front-ends) can refresh.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable
from uuid import UUID

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from prodmatic.core.config import settings

logger = logging.getLogger(__name__)


def view_redis_key(org_id: UUID | str, path: str) -> str:
    """Format: view:{org_id}:{path}"""
    return f"view:{org_id}:{path}"


class ViewCache:
    """Redis-backed cache of list views with explicit invalidation."""

    def __init__(self, redis: aioredis.Redis, ttl_seconds: int | None = None) -> None:
        self.redis = redis
        self.ttl_seconds = ttl_seconds or settings.VIEW_CACHE_TTL_SECONDS

    async def get(self, org_id: UUID, path: str) -> Any | None:
        try:
            raw = await self.redis.get(view_redis_key(org_id, path))
        except RedisError:
            logger.warning("View cache read failed", extra={"org_id": org_id, "path": path})
            return None
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, org_id: UUID, path: str, payload: Any) -> None:
        try:
            await self.redis.setex(
                view_redis_key(org_id, path),
                self.ttl_seconds,
                json.dumps(payload),
            )
        except RedisError:
            logger.warning("View cache write failed", extra={"org_id": org_id, "path": path})

    async def invalidate(self, org_id: UUID, paths: Iterable[str]) -> list[str]:
        """
        Drop cached views and announce them on the revalidation channel.

        Runs after the transaction committed, so a Redis outage is logged
        and the views simply expire with their TTL.
        """
        unique = sorted(set(paths))
        if not unique:
            return []
        try:
            await self.redis.delete(*(view_redis_key(org_id, path) for path in unique))
            await self.redis.publish(
                settings.REVALIDATE_CHANNEL,
                json.dumps({"org_id": str(org_id), "paths": unique}),
            )
        except RedisError:
            logger.error(
                "View invalidation failed",
                extra={"org_id": org_id, "path": ",".join(unique)},
            )
        else:
            logger.debug("Views invalidated", extra={"org_id": org_id, "path": ",".join(unique)})
        return unique
