"""
Task business logic.

Contributors create, edit, assign and move tasks; product managers delete
and bulk-update them. Assignees must be organization members and sprints
must be open sprints of the task's product.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import select

from prodmatic.core.dependencies import OrgContext
from prodmatic.core.errors import ValidationError
from prodmatic.models.member import OrgRole
from prodmatic.models.sprint import Sprint, SprintStatus
from prodmatic.models.task import Task, TaskStatus
from prodmatic.schemas.task import TaskResponse
from prodmatic.services.entity_service import EntityService

CLOSED_SPRINT_STATUSES = (SprintStatus.completed, SprintStatus.cancelled)


def board_view(sprint_id: UUID) -> str:
    return f"sprints/{sprint_id}/board"


class TaskService(EntityService[Task]):
    """Handles all task operations."""

    model = Task
    entity_type = "TASK"
    response_schema = TaskResponse

    create_role = OrgRole.contributor
    update_role = OrgRole.contributor
    transition_role = OrgRole.contributor
    delete_role = OrgRole.product_manager
    bulk_role = OrgRole.product_manager

    def views_for(self, entity: Task) -> set[str]:
        views = super().views_for(entity)
        if entity.sprint_id is not None:
            views.add(board_view(entity.sprint_id))
        return views

    # -----------------------------------------------------------------------
    # Validation
    # -----------------------------------------------------------------------

    async def validate_values(
        self, ctx: OrgContext, values: dict[str, Any], entity: Task | None
    ) -> None:
        assignee_id = values.get("assignee_id")
        if assignee_id is not None:
            if await self.guard.get_membership(assignee_id, ctx.org.id) is None:
                raise ValidationError(
                    "Assignee must be a member of the organization",
                    code="INVALID_ASSIGNEE",
                    field="assignee_id",
                )

        sprint_id = values.get("sprint_id")
        if sprint_id is not None:
            product_id = values.get("product_id") or entity.product_id
            sprint = await self.db.scalar(
                select(Sprint).where(
                    Sprint.id == sprint_id,
                    Sprint.org_id == ctx.org.id,
                    Sprint.deleted_at.is_(None),
                )
            )
            if sprint is None or sprint.product_id != product_id:
                raise ValidationError(
                    "Sprint not found in this product",
                    code="INVALID_SPRINT",
                    field="sprint_id",
                )
            if sprint.status in CLOSED_SPRINT_STATUSES:
                raise ValidationError(
                    f"Cannot plan tasks into a {sprint.status.value} sprint",
                    code="SPRINT_CLOSED",
                    field="sprint_id",
                )

    # -----------------------------------------------------------------------
    # Task-specific mutations
    # -----------------------------------------------------------------------

    async def _set_field(
        self, ctx: OrgContext, task_id: UUID, field: str, value: Any, action: str
    ) -> TaskResponse:
        async def change(task: Task) -> dict[str, Any]:
            await self.validate_values(ctx, {field: value}, task)
            return {"changes": self.apply_changes(task, {field: value})}

        return await self.mutate(ctx, task_id, self.update_role, action, change)

    async def set_status(
        self, ctx: OrgContext, task_id: UUID, status: TaskStatus
    ) -> TaskResponse:
        return await self.transition(ctx, task_id, status)

    async def set_assignee(
        self, ctx: OrgContext, task_id: UUID, assignee_id: UUID | None
    ) -> TaskResponse:
        return await self._set_field(ctx, task_id, "assignee_id", assignee_id, "ASSIGNED")

    async def move_to_sprint(
        self, ctx: OrgContext, task_id: UUID, sprint_id: UUID | None
    ) -> TaskResponse:
        """Plan a task into a sprint, or back to the backlog with None."""
        return await self._set_field(ctx, task_id, "sprint_id", sprint_id, "MOVED_TO_SPRINT")

    async def log_time(self, ctx: OrgContext, task_id: UUID, hours: float) -> TaskResponse:
        async def change(task: Task) -> dict[str, Any]:
            old = task.time_spent or 0.0
            task.time_spent = old + hours
            return {"hours": hours, "from": old, "to": task.time_spent}

        return await self.mutate(ctx, task_id, OrgRole.contributor, "TIME_LOGGED", change)
