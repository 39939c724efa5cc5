"""
Roadmap business logic.

Items live in now/next/later/parked lanes and are ordered by position inside
a lane. Only product managers shape the roadmap.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import func, select

from prodmatic.core.dependencies import OrgContext
from prodmatic.core.errors import ValidationError
from prodmatic.models.member import OrgRole
from prodmatic.models.roadmap import RoadmapItem, RoadmapLane, RoadmapStatus
from prodmatic.schemas.roadmap import (
    RoadmapItemResponse,
    RoadmapLaneResponse,
    RoadmapLanesResponse,
)
from prodmatic.services.entity_service import EntityService

LANE_ORDER = (RoadmapLane.now, RoadmapLane.next, RoadmapLane.later, RoadmapLane.parked)


def lanes_view(product_id: UUID) -> str:
    return f"products/{product_id}/roadmap"


class RoadmapService(EntityService[RoadmapItem]):
    """Handles all roadmap operations."""

    model = RoadmapItem
    entity_type = "ROADMAP_ITEM"
    response_schema = RoadmapItemResponse

    create_role = OrgRole.product_manager
    update_role = OrgRole.product_manager
    transition_role = OrgRole.product_manager
    delete_role = OrgRole.product_manager

    def ordering(self) -> list[Any]:
        return [RoadmapItem.position, RoadmapItem.created_at, RoadmapItem.id]

    def views_for(self, entity: RoadmapItem) -> set[str]:
        return super().views_for(entity) | {lanes_view(entity.product_id)}

    def describe(self, entity: RoadmapItem) -> dict[str, Any]:
        return {"title": entity.title, "lane": entity.lane}

    async def validate_values(
        self, ctx: OrgContext, values: dict[str, Any], entity: RoadmapItem | None
    ) -> None:
        start = values["start_date"] if "start_date" in values else getattr(entity, "start_date", None)
        end = values["end_date"] if "end_date" in values else getattr(entity, "end_date", None)
        if start is not None and end is not None and end < start:
            raise ValidationError(
                "end_date must be on or after start_date", field="end_date"
            )

    async def _next_position(self, product_id: UUID, lane: RoadmapLane) -> int:
        highest = await self.db.scalar(
            select(func.max(RoadmapItem.position)).where(
                RoadmapItem.product_id == product_id,
                RoadmapItem.lane == lane,
                RoadmapItem.deleted_at.is_(None),
            )
        )
        return 0 if highest is None else highest + 1

    async def move(
        self,
        ctx: OrgContext,
        item_id: UUID,
        lane: RoadmapLane,
        position: int | None = None,
    ) -> RoadmapItemResponse:
        """Move an item to a lane; without a position it goes to the end."""

        async def change(item: RoadmapItem) -> dict[str, Any]:
            old_lane, old_position = item.lane, item.position
            if position is None:
                new_position = await self._next_position(item.product_id, lane)
            else:
                new_position = position
            item.lane = lane
            item.position = new_position
            return {
                "from": {"lane": old_lane, "position": old_position},
                "to": {"lane": lane, "position": new_position},
            }

        return await self.mutate(ctx, item_id, OrgRole.product_manager, "MOVED", change)

    async def set_status(
        self, ctx: OrgContext, item_id: UUID, status: RoadmapStatus
    ) -> RoadmapItemResponse:
        return await self.transition(ctx, item_id, status)

    async def lanes(self, ctx: OrgContext, product_id: UUID) -> RoadmapLanesResponse:
        await self.authorize(ctx, self.read_role)
        await self.load_parent(ctx, product_id)

        path = lanes_view(product_id)
        cached = await self.cache.get(ctx.org.id, path)
        if cached is not None:
            return RoadmapLanesResponse.model_validate(cached)

        result = await self.db.execute(
            self.scoped()
            .where(RoadmapItem.org_id == ctx.org.id, RoadmapItem.product_id == product_id)
            .order_by(*self.ordering())
        )
        items = [RoadmapItemResponse.model_validate(i) for i in result.scalars()]
        response = RoadmapLanesResponse(
            lanes=[
                RoadmapLaneResponse(lane=lane, items=[i for i in items if i.lane == lane])
                for lane in LANE_ORDER
            ]
        )
        await self.cache.set(ctx.org.id, path, response.model_dump(mode="json"))
        return response
