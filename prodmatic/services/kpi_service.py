"""
KPI business logic. KPIs are defined and maintained by product managers.
"""

from __future__ import annotations

from typing import Any

from prodmatic.core.dependencies import OrgContext
from prodmatic.core.errors import ValidationError
from prodmatic.models.kpi import Kpi
from prodmatic.models.member import OrgRole
from prodmatic.schemas.kpi import KpiResponse
from prodmatic.services.entity_service import EntityService


class KpiService(EntityService[Kpi]):
    model = Kpi
    entity_type = "KPI"
    response_schema = KpiResponse
    label_field = "name"

    create_role = OrgRole.product_manager
    update_role = OrgRole.product_manager
    delete_role = OrgRole.product_manager

    def ordering(self) -> list[Any]:
        return [Kpi.is_active.desc(), Kpi.name, Kpi.id]

    def describe(self, entity: Kpi) -> dict[str, Any]:
        return {"name": entity.name, "metric": entity.metric, "target": entity.target}

    async def validate_values(
        self, ctx: OrgContext, values: dict[str, Any], entity: Kpi | None
    ) -> None:
        owner_id = values.get("owner_id")
        if owner_id is not None:
            if await self.guard.get_membership(owner_id, ctx.org.id) is None:
                raise ValidationError(
                    "Owner must be a member of the organization",
                    code="INVALID_OWNER",
                    field="owner_id",
                )
