"""
Experiment business logic.

Status changes are free-form; starting an experiment stamps its start date
and finishing it stamps the end date when they were not planned up front.
An experiment whose planned start lies in the future cannot be completed.
"""

from __future__ import annotations

from datetime import date
from typing import Any
from uuid import UUID

from prodmatic.core.dependencies import OrgContext
from prodmatic.core.errors import ValidationError
from prodmatic.models.experiment import Experiment, ExperimentStatus
from prodmatic.models.member import OrgRole
from prodmatic.schemas.experiment import ExperimentResponse
from prodmatic.services.entity_service import EntityService


class ExperimentService(EntityService[Experiment]):
    """Handles all experiment operations."""

    model = Experiment
    entity_type = "EXPERIMENT"
    response_schema = ExperimentResponse
    label_field = "name"

    create_role = OrgRole.contributor
    update_role = OrgRole.contributor
    transition_role = OrgRole.contributor
    delete_role = OrgRole.product_manager

    def ordering(self) -> list[Any]:
        return [Experiment.created_at.desc(), Experiment.id]

    async def validate_values(
        self, ctx: OrgContext, values: dict[str, Any], entity: Experiment | None
    ) -> None:
        owner_id = values.get("owner_id")
        if owner_id is not None:
            if await self.guard.get_membership(owner_id, ctx.org.id) is None:
                raise ValidationError(
                    "Owner must be a member of the organization",
                    code="INVALID_OWNER",
                    field="owner_id",
                )

        start = values["start_date"] if "start_date" in values else getattr(entity, "start_date", None)
        end = values["end_date"] if "end_date" in values else getattr(entity, "end_date", None)
        if start is not None and end is not None and end < start:
            raise ValidationError(
                "end_date must be on or after start_date", field="end_date"
            )

    async def set_status(
        self, ctx: OrgContext, experiment_id: UUID, status: ExperimentStatus
    ) -> ExperimentResponse:
        async def change(experiment: Experiment) -> dict[str, Any]:
            today = date.today()
            if status == ExperimentStatus.completed and experiment.end_date is None:
                if experiment.start_date is not None and experiment.start_date > today:
                    raise ValidationError(
                        "Cannot complete an experiment before its start date",
                        code="INVALID_STATUS",
                        field="end_date",
                    )
                experiment.end_date = today
            if status == ExperimentStatus.running and experiment.start_date is None:
                experiment.start_date = today

            old = experiment.status
            experiment.status = status
            return {"field": "status", "from": old, "to": status}

        return await self.mutate(
            ctx, experiment_id, self.transition_role, "STATUS_CHANGED", change
        )
