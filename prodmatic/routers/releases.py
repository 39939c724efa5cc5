"""
Release, launch checklist and changelog endpoints.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import OrgContext, get_guard, get_org_context, get_redis
from prodmatic.core.permissions import MembershipGuard
from prodmatic.models.release import ChangelogType, ChangelogVisibility
from prodmatic.schemas.release import (
    ChangelogCreateRequest,
    ChangelogListResponse,
    ChangelogResponse,
    ChangelogUpdateRequest,
    ChecklistItemCreateRequest,
    ChecklistItemResponse,
    ChecklistItemUpdateRequest,
    ChecklistListResponse,
    ChecklistTemplateRequest,
    ReleaseCreateRequest,
    ReleaseListResponse,
    ReleaseReadinessResponse,
    ReleaseResponse,
    ReleaseStatusUpdateRequest,
    ReleaseUpdateRequest,
)
from prodmatic.services.release_service import ChangelogService, ChecklistService, ReleaseService

router = APIRouter()


def get_release_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> ReleaseService:
    return ReleaseService(db=db, redis=redis, guard=guard)


def get_checklist_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> ChecklistService:
    return ChecklistService(db=db, redis=redis, guard=guard)


def get_changelog_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> ChangelogService:
    return ChangelogService(db=db, redis=redis, guard=guard)


# ---------------------------------------------------------------------------
# Releases
# ---------------------------------------------------------------------------

@router.get(
    "/organizations/{slug}/products/{product_id}/releases",
    response_model=ReleaseListResponse,
    summary="List releases of a product",
)
async def list_releases(
    product_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: ReleaseService = Depends(get_release_service),
) -> ReleaseListResponse:
    releases = await service.list_items(ctx, product_id)
    return ReleaseListResponse(releases=releases, total=len(releases))


@router.post(
    "/organizations/{slug}/products/{product_id}/releases",
    response_model=ReleaseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Plan a release",
)
async def create_release(
    product_id: UUID,
    data: ReleaseCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: ReleaseService = Depends(get_release_service),
) -> ReleaseResponse:
    return await service.create(ctx, data, product_id)


@router.get("/organizations/{slug}/releases/{release_id}", response_model=ReleaseResponse)
async def get_release(
    release_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: ReleaseService = Depends(get_release_service),
) -> ReleaseResponse:
    return await service.get(ctx, release_id)


@router.patch("/organizations/{slug}/releases/{release_id}", response_model=ReleaseResponse)
async def update_release(
    release_id: UUID,
    data: ReleaseUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: ReleaseService = Depends(get_release_service),
) -> ReleaseResponse:
    return await service.update(ctx, release_id, data)


@router.put(
    "/organizations/{slug}/releases/{release_id}/status", response_model=ReleaseResponse
)
async def set_release_status(
    release_id: UUID,
    data: ReleaseStatusUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: ReleaseService = Depends(get_release_service),
) -> ReleaseResponse:
    return await service.set_status(ctx, release_id, data.status)


@router.post(
    "/organizations/{slug}/releases/{release_id}/deploy", response_model=ReleaseResponse
)
async def deploy_release(
    release_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: ReleaseService = Depends(get_release_service),
) -> ReleaseResponse:
    """Mark the release as released today."""
    return await service.deploy(ctx, release_id)


@router.delete("/organizations/{slug}/releases/{release_id}", status_code=status.HTTP_200_OK)
async def delete_release(
    release_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: ReleaseService = Depends(get_release_service),
) -> dict:
    """Soft delete; the release's checklist goes with it."""
    await service.delete(ctx, release_id)
    return {}


# ---------------------------------------------------------------------------
# Launch checklist
# ---------------------------------------------------------------------------

@router.get(
    "/organizations/{slug}/releases/{release_id}/checklist",
    response_model=ChecklistListResponse,
    summary="List checklist items of a release",
)
async def list_checklist(
    release_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: ChecklistService = Depends(get_checklist_service),
) -> ChecklistListResponse:
    items = await service.list_items(ctx, release_id)
    return ChecklistListResponse(items=items, total=len(items))


@router.post(
    "/organizations/{slug}/releases/{release_id}/checklist",
    response_model=ChecklistItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_checklist_item(
    release_id: UUID,
    data: ChecklistItemCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: ChecklistService = Depends(get_checklist_service),
) -> ChecklistItemResponse:
    return await service.create(ctx, data, release_id)


@router.post(
    "/organizations/{slug}/releases/{release_id}/checklist/template",
    response_model=ChecklistListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a checklist template to a release",
)
async def apply_checklist_template(
    release_id: UUID,
    data: ChecklistTemplateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: ChecklistService = Depends(get_checklist_service),
) -> ChecklistListResponse:
    """Creates the basic (8), comprehensive (19) or enterprise (31) item set."""
    items = await service.apply_template(ctx, release_id, data.template)
    return ChecklistListResponse(items=items, total=len(items))


@router.get(
    "/organizations/{slug}/releases/{release_id}/readiness",
    response_model=ReleaseReadinessResponse,
)
async def get_release_readiness(
    release_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: ChecklistService = Depends(get_checklist_service),
) -> ReleaseReadinessResponse:
    return await service.readiness(ctx, release_id)


@router.patch(
    "/organizations/{slug}/checklist/{item_id}", response_model=ChecklistItemResponse
)
async def update_checklist_item(
    item_id: UUID,
    data: ChecklistItemUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: ChecklistService = Depends(get_checklist_service),
) -> ChecklistItemResponse:
    return await service.update(ctx, item_id, data)


@router.post(
    "/organizations/{slug}/checklist/{item_id}/toggle", response_model=ChecklistItemResponse
)
async def toggle_checklist_item(
    item_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: ChecklistService = Depends(get_checklist_service),
) -> ChecklistItemResponse:
    return await service.toggle(ctx, item_id)


@router.delete("/organizations/{slug}/checklist/{item_id}", status_code=status.HTTP_200_OK)
async def delete_checklist_item(
    item_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: ChecklistService = Depends(get_checklist_service),
) -> dict:
    await service.delete(ctx, item_id)
    return {}


# ---------------------------------------------------------------------------
# Changelog
# ---------------------------------------------------------------------------

@router.get(
    "/organizations/{slug}/products/{product_id}/changelogs",
    response_model=ChangelogListResponse,
    summary="List changelog entries of a product",
)
async def list_changelogs(
    product_id: UUID,
    type_filter: ChangelogType | None = Query(default=None, alias="type"),
    visibility: ChangelogVisibility | None = Query(default=None),
    release_id: UUID | None = Query(default=None),
    ctx: OrgContext = Depends(get_org_context),
    service: ChangelogService = Depends(get_changelog_service),
) -> ChangelogListResponse:
    changelogs = await service.list_items(
        ctx, product_id, type=type_filter, visibility=visibility, release_id=release_id
    )
    return ChangelogListResponse(changelogs=changelogs, total=len(changelogs))


@router.post(
    "/organizations/{slug}/products/{product_id}/changelogs",
    response_model=ChangelogResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_changelog(
    product_id: UUID,
    data: ChangelogCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: ChangelogService = Depends(get_changelog_service),
) -> ChangelogResponse:
    """The release, when given, must be a release of the same product."""
    return await service.create(ctx, data, product_id)


@router.get("/organizations/{slug}/changelogs/{changelog_id}", response_model=ChangelogResponse)
async def get_changelog(
    changelog_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: ChangelogService = Depends(get_changelog_service),
) -> ChangelogResponse:
    return await service.get(ctx, changelog_id)


@router.patch(
    "/organizations/{slug}/changelogs/{changelog_id}", response_model=ChangelogResponse
)
async def update_changelog(
    changelog_id: UUID,
    data: ChangelogUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: ChangelogService = Depends(get_changelog_service),
) -> ChangelogResponse:
    return await service.update(ctx, changelog_id, data)


@router.delete(
    "/organizations/{slug}/changelogs/{changelog_id}", status_code=status.HTTP_200_OK
)
async def delete_changelog(
    changelog_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: ChangelogService = Depends(get_changelog_service),
) -> dict:
    await service.delete(ctx, changelog_id)
    return {}
