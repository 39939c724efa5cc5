"""
Activity recording and the organization audit feed.

Entries are written into the caller's session, so they commit or roll back
together with the mutation they describe.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from pydantic_core import to_jsonable_python
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.errors import StorageError
from prodmatic.models.activity_log import ActivityLog
from prodmatic.schemas.activity import ActivityListResponse, ActivityResponse

logger = logging.getLogger(__name__)


class ActivityRecorder:
    """Appends immutable audit entries and reads the feed back."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def log_activity(
        self,
        *,
        actor_id: UUID,
        org_id: UUID,
        action: str,
        entity_type: str,
        entity_id: UUID,
        metadata: dict[str, Any] | None = None,
    ) -> ActivityLog:
        """
        Append one audit entry.

        Raises StorageError when the store rejects the write; the caller's
        transaction is then rolled back as a whole.
        """
        entry = ActivityLog(
            org_id=org_id,
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            metadata_=to_jsonable_python(metadata or {}),
        )
        self.db.add(entry)
        try:
            await self.db.flush()
        except SQLAlchemyError as exc:
            logger.error(
                "Failed to record activity",
                extra={"org_id": org_id, "action": action, "entity_id": entity_id},
            )
            raise StorageError("Could not record activity") from exc

        logger.info(
            action,
            extra={
                "org_id": org_id,
                "actor_id": actor_id,
                "action": action,
                "entity_type": entity_type,
                "entity_id": entity_id,
            },
        )
        return entry

    async def list_activity(
        self,
        org_id: UUID,
        *,
        entity_type: str | None = None,
        entity_id: UUID | None = None,
        actor_id: UUID | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> ActivityListResponse:
        """Audit feed for one organization, newest first."""
        conditions = [ActivityLog.org_id == org_id]
        if entity_type is not None:
            conditions.append(ActivityLog.entity_type == entity_type.upper())
        if entity_id is not None:
            conditions.append(ActivityLog.entity_id == entity_id)
        if actor_id is not None:
            conditions.append(ActivityLog.actor_id == actor_id)

        total = await self.db.scalar(
            select(func.count()).select_from(ActivityLog).where(*conditions)
        )
        result = await self.db.execute(
            select(ActivityLog)
            .where(*conditions)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id)
            .offset(skip)
            .limit(limit)
        )
        activities = [ActivityResponse.model_validate(a) for a in result.scalars()]
        return ActivityListResponse(
            activities=activities, total=total or 0, skip=skip, limit=limit
        )
