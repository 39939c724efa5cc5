"""
Organization activity feed.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import OrgContext, require_role
from prodmatic.models.member import OrgMember, OrgRole
from prodmatic.schemas.activity import ActivityListResponse
from prodmatic.services.activity_service import ActivityRecorder

router = APIRouter()


@router.get(
    "/organizations/{slug}/activity",
    response_model=ActivityListResponse,
    summary="List the organization audit feed",
)
async def list_activity(
    entity_type: str | None = Query(default=None, max_length=50),
    entity_id: UUID | None = Query(default=None),
    actor_id: UUID | None = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
    member_ctx: tuple[OrgContext, OrgMember] = Depends(require_role(OrgRole.stakeholder)),
    db: AsyncSession = Depends(get_db),
) -> ActivityListResponse:
    """Newest entries first. Any member may read the feed."""
    ctx, _ = member_ctx
    return await ActivityRecorder(db).list_activity(
        ctx.org.id,
        entity_type=entity_type,
        entity_id=entity_id,
        actor_id=actor_id,
        skip=skip,
        limit=limit,
    )
