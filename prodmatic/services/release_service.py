"""
Release, launch checklist and changelog business logic.

Releases are managed by product managers. Checklist items belong to a
release; contributors add and tick them off, product managers delete items
and apply templates. Changelog entries are written by contributors and
stay with the product when their release is deleted.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import select, update

from prodmatic.core.dependencies import OrgContext
from prodmatic.core.errors import ValidationError
from prodmatic.models.base import utcnow
from prodmatic.models.member import OrgRole
from prodmatic.models.release import Changelog, ChecklistItem, Release, ReleaseStatus
from prodmatic.schemas.release import (
    ChangelogResponse,
    ChecklistItemResponse,
    ReleaseReadinessResponse,
    ReleaseResponse,
)
from prodmatic.services.checklist_templates import TEMPLATES
from prodmatic.services.entity_service import EntityService

FINAL_RELEASE_STATUSES = (ReleaseStatus.released, ReleaseStatus.cancelled)


def checklist_view(release_id: UUID) -> str:
    return f"releases/{release_id}/checklist_items"


class ReleaseService(EntityService[Release]):
    """Handles all release operations."""

    model = Release
    entity_type = "RELEASE"
    response_schema = ReleaseResponse
    label_field = "version"

    create_role = OrgRole.product_manager
    update_role = OrgRole.product_manager
    transition_role = OrgRole.product_manager
    delete_role = OrgRole.product_manager

    def ordering(self) -> list[Any]:
        return [Release.created_at.desc(), Release.id]

    def describe(self, entity: Release) -> dict[str, Any]:
        return {"name": entity.name, "version": entity.version}

    async def on_delete(self, ctx: OrgContext, entity: Release) -> None:
        result = await self.db.execute(
            select(ChecklistItem).where(
                ChecklistItem.release_id == entity.id,
                ChecklistItem.deleted_at.is_(None),
            )
        )
        for item in result.scalars():
            item.deleted_at = entity.deleted_at
        self.touch(checklist_view(entity.id))
        # change notes outlive their release
        await self.db.execute(
            update(Changelog).where(Changelog.release_id == entity.id).values(release_id=None)
        )
        self.touch(f"products/{entity.product_id}/changelogs")

    async def set_status(
        self, ctx: OrgContext, release_id: UUID, status: ReleaseStatus
    ) -> ReleaseResponse:
        async def change(release: Release) -> dict[str, Any]:
            old = release.status
            release.status = status
            if status == ReleaseStatus.released and old != ReleaseStatus.released:
                release.release_date = utcnow()
            return {"field": "status", "from": old, "to": status}

        return await self.mutate(ctx, release_id, self.transition_role, "STATUS_CHANGED", change)

    async def deploy(self, ctx: OrgContext, release_id: UUID) -> ReleaseResponse:
        """Mark a release as shipped now."""

        async def change(release: Release) -> dict[str, Any]:
            if release.status in FINAL_RELEASE_STATUSES:
                raise ValidationError(
                    f"Release is already {release.status.value}", code="INVALID_STATUS"
                )
            old = release.status
            release.status = ReleaseStatus.released
            release.release_date = utcnow()
            return {"from": old, "to": release.status, "version": release.version}

        return await self.mutate(ctx, release_id, OrgRole.product_manager, "DEPLOYED", change)


class ChecklistService(EntityService[ChecklistItem]):
    """Handles launch checklist items of a release."""

    model = ChecklistItem
    entity_type = "CHECKLIST_ITEM"
    response_schema = ChecklistItemResponse
    parent_model = Release
    parent_field = "release_id"
    parent_label = "release"

    create_role = OrgRole.contributor
    update_role = OrgRole.contributor
    delete_role = OrgRole.product_manager

    async def validate_values(
        self, ctx: OrgContext, values: dict[str, Any], entity: ChecklistItem | None
    ) -> None:
        assignee_id = values.get("assignee_id")
        if assignee_id is not None:
            if await self.guard.get_membership(assignee_id, ctx.org.id) is None:
                raise ValidationError(
                    "Assignee must be a member of the organization",
                    code="INVALID_ASSIGNEE",
                    field="assignee_id",
                )

    async def toggle(self, ctx: OrgContext, item_id: UUID) -> ChecklistItemResponse:
        async def change(item: ChecklistItem) -> dict[str, Any]:
            item.is_completed = not item.is_completed
            item.completed_at = utcnow() if item.is_completed else None
            return {"title": item.title, "is_completed": item.is_completed}

        return await self.mutate(ctx, item_id, OrgRole.contributor, "TOGGLED", change)

    async def apply_template(
        self, ctx: OrgContext, release_id: UUID, template: str
    ) -> list[ChecklistItemResponse]:
        """Add every item of a template to the release, audited one by one."""
        await self.authorize(ctx, OrgRole.product_manager)
        release = await self.load_parent(ctx, release_id)

        items = []
        for title, category, is_required in TEMPLATES[template]:
            item = await self.insert(
                ctx,
                {
                    "release_id": release.id,
                    "title": title,
                    "category": category,
                    "is_required": is_required,
                },
            )
            await self.record(
                ctx, "CREATED", item, {"title": title, "template": template}
            )
            items.append(item)

        await self.commit(ctx, {self.list_view(release.id)})
        return [await self.present(item) for item in items]

    async def readiness(self, ctx: OrgContext, release_id: UUID) -> ReleaseReadinessResponse:
        """A release is ready once every required item is completed."""
        await self.authorize(ctx, self.read_role)
        await self.load_parent(ctx, release_id)

        result = await self.db.execute(
            self.scoped().where(
                ChecklistItem.org_id == ctx.org.id,
                ChecklistItem.release_id == release_id,
            )
        )
        items = list(result.scalars())
        completed = sum(1 for i in items if i.is_completed)
        required = [i for i in items if i.is_required]
        required_completed = sum(1 for i in required if i.is_completed)

        return ReleaseReadinessResponse(
            release_id=release_id,
            total=len(items),
            completed=completed,
            required=len(required),
            required_completed=required_completed,
            percent_complete=round(completed / len(items) * 100, 1) if items else 0.0,
            ready=required_completed == len(required),
        )


class ChangelogService(EntityService[Changelog]):
    """Change notes of a product, optionally tied to one of its releases."""

    model = Changelog
    entity_type = "CHANGELOG"
    response_schema = ChangelogResponse

    create_role = OrgRole.contributor
    update_role = OrgRole.contributor
    delete_role = OrgRole.product_manager

    def ordering(self) -> list[Any]:
        return [Changelog.created_at.desc(), Changelog.id]

    def describe(self, entity: Changelog) -> dict[str, Any]:
        return {"title": entity.title, "type": entity.type, "release_id": entity.release_id}

    async def validate_values(
        self, ctx: OrgContext, values: dict[str, Any], entity: Changelog | None
    ) -> None:
        release_id = values.get("release_id")
        if release_id is None:
            return
        product_id = values["product_id"] if entity is None else entity.product_id
        release = await self.db.scalar(
            select(Release.id).where(
                Release.id == release_id,
                Release.org_id == ctx.org.id,
                Release.product_id == product_id,
                Release.deleted_at.is_(None),
            )
        )
        if release is None:
            raise ValidationError(
                "Release must belong to the same product",
                code="INVALID_RELEASE",
                field="release_id",
            )
