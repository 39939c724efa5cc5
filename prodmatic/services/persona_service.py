"""
Persona business logic. Personas are curated by product managers.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from prodmatic.core.dependencies import OrgContext
from prodmatic.models.member import OrgRole
from prodmatic.models.persona import Persona
from prodmatic.schemas.persona import PersonaResponse
from prodmatic.services.entity_service import EntityService

COPIED_FIELDS = (
    "description",
    "demographics",
    "goals",
    "pains",
    "gains",
    "behaviors",
    "motivations",
    "channels",
)


class PersonaService(EntityService[Persona]):
    """Handles all persona operations."""

    model = Persona
    entity_type = "PERSONA"
    response_schema = PersonaResponse
    label_field = "name"

    create_role = OrgRole.product_manager
    update_role = OrgRole.product_manager
    transition_role = OrgRole.product_manager
    delete_role = OrgRole.product_manager

    def ordering(self) -> list[Any]:
        return [Persona.is_primary.desc(), Persona.name, Persona.id]

    async def set_primary(
        self, ctx: OrgContext, persona_id: UUID, is_primary: bool
    ) -> PersonaResponse:
        return await self.transition(
            ctx, persona_id, is_primary, field="is_primary", action="PRIORITY_CHANGED"
        )

    async def duplicate(self, ctx: OrgContext, persona_id: UUID) -> PersonaResponse:
        """Copy a persona; the copy is never primary."""
        original = await self.load_authorized(ctx, persona_id, self.create_role)
        values = {field: getattr(original, field) for field in COPIED_FIELDS}
        copy = await self.insert(
            ctx,
            {
                **values,
                "product_id": original.product_id,
                "name": f"{original.name[:193]} (Copy)",
                "is_primary": False,
            },
        )
        return await self.finish(
            ctx, copy, "DUPLICATED", {"name": copy.name, "original_id": original.id}
        )
