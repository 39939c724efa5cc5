"""
OKR and key result business logic.

OKR progress is derived from its live key results and stored on the OKR so
lists do not need to aggregate.
"""

from __future__ import annotations

from typing import Any, Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.dependencies import OrgContext
from prodmatic.core.errors import ValidationError
from prodmatic.models.member import OrgRole
from prodmatic.models.okr import KeyResult, Okr
from prodmatic.schemas.okr import KeyResultResponse, OkrResponse
from prodmatic.services.entity_service import EntityService


def progress_from(key_results: Iterable[KeyResult]) -> float:
    """Mean of min(current / target, 1) over the key results, 0 without any."""
    ratios = [
        min(kr.current / kr.target, 1.0) if kr.target > 0 else 0.0
        for kr in key_results
    ]
    if not ratios:
        return 0.0
    return round(sum(ratios) / len(ratios), 4)


async def live_key_results(db: AsyncSession, okr_id: UUID) -> list[KeyResult]:
    result = await db.execute(
        select(KeyResult)
        .where(KeyResult.okr_id == okr_id, KeyResult.deleted_at.is_(None))
        .order_by(KeyResult.created_at, KeyResult.id)
    )
    return list(result.scalars())


async def calculate_progress(db: AsyncSession, okr_id: UUID) -> float:
    return progress_from(await live_key_results(db, okr_id))


class OkrService(EntityService[Okr]):
    """Handles all OKR operations."""

    model = Okr
    entity_type = "OKR"
    response_schema = OkrResponse
    label_field = "objective"

    create_role = OrgRole.product_manager
    update_role = OrgRole.product_manager
    transition_role = OrgRole.product_manager
    delete_role = OrgRole.product_manager

    def ordering(self) -> list[Any]:
        return [Okr.year.desc(), Okr.quarter.desc(), Okr.created_at, Okr.id]

    async def present(self, entity: Okr) -> OkrResponse:
        key_results = await live_key_results(self.db, entity.id)
        return OkrResponse.model_validate(entity).model_copy(
            update={"key_results": [KeyResultResponse.model_validate(kr) for kr in key_results]}
        )

    async def validate_values(
        self, ctx: OrgContext, values: dict[str, Any], entity: Okr | None
    ) -> None:
        owner_id = values.get("owner_id")
        if owner_id is not None:
            if await self.guard.get_membership(owner_id, ctx.org.id) is None:
                raise ValidationError(
                    "Owner must be a member of the organization",
                    code="INVALID_OWNER",
                    field="owner_id",
                )

    async def insert(self, ctx: OrgContext, values: dict[str, Any]) -> Okr:
        key_results = values.pop("key_results", [])
        okr = await super().insert(ctx, values)
        for kr in key_results:
            self.db.add(KeyResult(org_id=ctx.org.id, okr_id=okr.id, **kr))
        await self.db.flush()
        okr.progress = await calculate_progress(self.db, okr.id)
        await self.db.flush()
        return okr

    def describe(self, entity: Okr) -> dict[str, Any]:
        return {
            "objective": entity.objective,
            "quarter": entity.quarter,
            "year": entity.year,
        }

    async def on_delete(self, ctx: OrgContext, entity: Okr) -> None:
        for kr in await live_key_results(self.db, entity.id):
            kr.deleted_at = entity.deleted_at

    async def recalculate_progress(self, ctx: OrgContext, okr_id: UUID) -> OkrResponse:
        async def change(okr: Okr) -> dict[str, Any]:
            old = okr.progress
            okr.progress = await calculate_progress(self.db, okr.id)
            return {"from": old, "to": okr.progress}

        return await self.mutate(
            ctx, okr_id, OrgRole.contributor, "PROGRESS_RECALCULATED", change
        )


class KeyResultService(EntityService[KeyResult]):
    """Key result check-ins; every change refreshes the parent OKR progress."""

    model = KeyResult
    entity_type = "KEY_RESULT"
    response_schema = KeyResultResponse
    parent_model = Okr
    parent_field = "okr_id"
    parent_label = "okr"
    label_field = "description"

    update_role = OrgRole.contributor

    async def update(self, ctx: OrgContext, entity_id: UUID, data: Any) -> KeyResultResponse:
        changes = data.model_dump(exclude_unset=True)

        async def apply(kr: KeyResult) -> dict[str, Any]:
            diff = self.apply_changes(kr, changes)
            await self.db.flush()

            okr = await self.db.get(Okr, kr.okr_id)
            old_progress = okr.progress
            okr.progress = await calculate_progress(self.db, okr.id)
            self.touch(f"products/{okr.product_id}/okrs")
            return {
                "changes": diff,
                "okr_id": okr.id,
                "progress": {"old": old_progress, "new": okr.progress},
            }

        return await self.mutate(ctx, entity_id, self.update_role, "UPDATED", apply)
