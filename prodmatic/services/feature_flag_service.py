"""
Feature flag business logic.

Contributors create, toggle and roll out flags; product managers delete
them. Keys are unique among the live flags of a product.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import select

from prodmatic.core.dependencies import OrgContext
from prodmatic.core.errors import ConflictError
from prodmatic.models.feature_flag import FeatureFlag
from prodmatic.models.member import OrgRole
from prodmatic.schemas.feature_flag import FeatureFlagResponse
from prodmatic.services.entity_service import EntityService


class FeatureFlagService(EntityService[FeatureFlag]):
    """Handles all feature flag operations."""

    model = FeatureFlag
    entity_type = "FEATURE_FLAG"
    response_schema = FeatureFlagResponse
    label_field = "key"

    create_role = OrgRole.contributor
    update_role = OrgRole.contributor
    transition_role = OrgRole.contributor
    delete_role = OrgRole.product_manager

    def ordering(self) -> list[Any]:
        return [FeatureFlag.key, FeatureFlag.id]

    def describe(self, entity: FeatureFlag) -> dict[str, Any]:
        return {"name": entity.name, "key": entity.key}

    async def validate_values(
        self, ctx: OrgContext, values: dict[str, Any], entity: FeatureFlag | None
    ) -> None:
        key = values.get("key")
        if key is None or (entity is not None and key == entity.key):
            return
        product_id = values["product_id"] if entity is None else entity.product_id
        existing = await self.db.scalar(
            select(FeatureFlag.id).where(
                FeatureFlag.product_id == product_id,
                FeatureFlag.key == key,
                FeatureFlag.deleted_at.is_(None),
            )
        )
        if existing is not None:
            raise ConflictError(
                f"Flag key {key} is already in use", code="FLAG_KEY_TAKEN", field="key"
            )

    async def toggle(self, ctx: OrgContext, flag_id: UUID, enabled: bool) -> FeatureFlagResponse:
        return await self.transition(ctx, flag_id, enabled, field="enabled", action="TOGGLED")

    async def set_rollout(
        self, ctx: OrgContext, flag_id: UUID, rollout: float
    ) -> FeatureFlagResponse:
        return await self.transition(
            ctx, flag_id, rollout, field="rollout", action="ROLLOUT_CHANGED"
        )
