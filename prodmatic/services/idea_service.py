"""
Idea business logic.

Contributors submit and vote; the creator or a product manager edits; status
decisions belong to product managers; the creator or an admin deletes.
"""

from __future__ import annotations

from typing import Any, Literal
from uuid import UUID

from prodmatic.core.dependencies import OrgContext
from prodmatic.models.idea import Idea, IdeaStatus
from prodmatic.models.member import OrgRole
from prodmatic.schemas.idea import IdeaResponse
from prodmatic.services.entity_service import EntityService


class IdeaService(EntityService[Idea]):
    """Handles all idea operations."""

    model = Idea
    entity_type = "IDEA"
    response_schema = IdeaResponse
    owner_field = "created_by"

    create_role = OrgRole.contributor
    update_role = OrgRole.product_manager
    transition_role = OrgRole.product_manager
    delete_role = OrgRole.admin

    def sort_responses(self, items: list[IdeaResponse]) -> list[IdeaResponse]:
        """Highest RICE score first; unscored ideas keep creation order at the end."""
        return sorted(
            items,
            key=lambda idea: (idea.rice_score is None, -(idea.rice_score or 0)),
        )

    async def vote(
        self, ctx: OrgContext, idea_id: UUID, direction: Literal["up", "down"]
    ) -> IdeaResponse:
        """Votes never drop below zero."""

        async def change(idea: Idea) -> dict[str, Any]:
            old = idea.votes
            idea.votes = old + 1 if direction == "up" else max(0, old - 1)
            return {"direction": direction, "from": old, "to": idea.votes}

        action = "UPVOTED" if direction == "up" else "DOWNVOTED"
        return await self.mutate(ctx, idea_id, OrgRole.contributor, action, change)

    async def set_status(
        self, ctx: OrgContext, idea_id: UUID, status: IdeaStatus
    ) -> IdeaResponse:
        return await self.transition(ctx, idea_id, status)
