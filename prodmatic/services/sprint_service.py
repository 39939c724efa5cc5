"""
Sprint business logic.

Lifecycle: planned -> active -> completed (or cancelled). Only one sprint per
product is active at a time, a sprint needs tasks to start, and completing it
records velocity as the effort of its done tasks.
"""

from __future__ import annotations

from typing import Any, Literal
from uuid import UUID

from sqlalchemy import func, select

from prodmatic.core.dependencies import OrgContext
from prodmatic.core.errors import ConflictError, NotFoundError, ValidationError
from prodmatic.models.base import utcnow
from prodmatic.models.member import OrgRole
from prodmatic.models.sprint import Sprint, SprintStatus
from prodmatic.models.task import Task, TaskStatus
from prodmatic.schemas.sprint import BoardColumn, SprintBoardResponse, SprintResponse
from prodmatic.schemas.task import TaskResponse
from prodmatic.services.entity_service import EntityService
from prodmatic.services.task_service import board_view

# Kanban column order
BOARD_COLUMNS = (
    TaskStatus.new,
    TaskStatus.in_progress,
    TaskStatus.in_review,
    TaskStatus.done,
    TaskStatus.cancelled,
)


def task_list_view(product_id: UUID) -> str:
    return f"products/{product_id}/tasks"


class SprintService(EntityService[Sprint]):
    """Handles all sprint operations."""

    model = Sprint
    entity_type = "SPRINT"
    response_schema = SprintResponse
    label_field = "name"

    create_role = OrgRole.product_manager
    update_role = OrgRole.product_manager
    transition_role = OrgRole.product_manager
    delete_role = OrgRole.product_manager

    def views_for(self, entity: Sprint) -> set[str]:
        return super().views_for(entity) | {board_view(entity.id)}

    async def validate_values(
        self, ctx: OrgContext, values: dict[str, Any], entity: Sprint | None
    ) -> None:
        start = values["start_date"] if "start_date" in values else getattr(entity, "start_date", None)
        end = values["end_date"] if "end_date" in values else getattr(entity, "end_date", None)
        if start is not None and end is not None and end < start:
            raise ValidationError(
                "end_date must be on or after start_date", field="end_date"
            )

    async def _live_tasks(self, sprint: Sprint) -> list[Task]:
        result = await self.db.execute(
            select(Task)
            .where(
                Task.sprint_id == sprint.id,
                Task.org_id == sprint.org_id,
                Task.deleted_at.is_(None),
            )
            .order_by(Task.created_at, Task.id)
        )
        return list(result.scalars())

    async def on_delete(self, ctx: OrgContext, entity: Sprint) -> None:
        # tasks of a deleted sprint fall back to the backlog
        for task in await self._live_tasks(entity):
            task.sprint_id = None
        self.touch(task_list_view(entity.product_id))

    # -----------------------------------------------------------------------
    # Start / Complete
    # -----------------------------------------------------------------------

    async def start(self, ctx: OrgContext, sprint_id: UUID) -> SprintResponse:
        async def change(sprint: Sprint) -> dict[str, Any]:
            if sprint.status != SprintStatus.planned:
                raise ValidationError(
                    "Only planned sprints can be started", code="INVALID_STATUS"
                )
            active = await self.db.scalar(
                select(Sprint.id).where(
                    Sprint.product_id == sprint.product_id,
                    Sprint.status == SprintStatus.active,
                    Sprint.deleted_at.is_(None),
                    Sprint.id != sprint.id,
                )
            )
            if active is not None:
                raise ConflictError(
                    "A sprint is already active for this product",
                    code="ACTIVE_SPRINT_EXISTS",
                )
            task_count = await self.db.scalar(
                select(func.count()).select_from(Task).where(
                    Task.sprint_id == sprint.id, Task.deleted_at.is_(None)
                )
            )
            if not task_count:
                raise ValidationError(
                    "Cannot start a sprint without tasks", code="EMPTY_SPRINT"
                )

            sprint.status = SprintStatus.active
            sprint.started_at = utcnow()
            return {"from": SprintStatus.planned, "to": sprint.status, "task_count": task_count}

        return await self.mutate(ctx, sprint_id, OrgRole.product_manager, "STARTED", change)

    async def complete(
        self,
        ctx: OrgContext,
        sprint_id: UUID,
        incomplete_task_action: Literal["keep", "move_to_backlog"] = "keep",
    ) -> SprintResponse:
        async def change(sprint: Sprint) -> dict[str, Any]:
            if sprint.status != SprintStatus.active:
                raise ValidationError(
                    "Only active sprints can be completed", code="INVALID_STATUS"
                )
            tasks = await self._live_tasks(sprint)
            done = [t for t in tasks if t.status == TaskStatus.done]
            incomplete = [t for t in tasks if t.status != TaskStatus.done]

            moved: list[UUID] = []
            if incomplete_task_action == "move_to_backlog":
                for task in incomplete:
                    task.sprint_id = None
                    moved.append(task.id)
                self.touch(task_list_view(sprint.product_id))

            sprint.velocity = sum(t.effort or 0 for t in done)
            sprint.status = SprintStatus.completed
            sprint.completed_at = utcnow()
            return {
                "velocity": sprint.velocity,
                "completed_tasks": len(done),
                "incomplete_tasks": len(incomplete),
                "moved_to_backlog": moved,
            }

        return await self.mutate(ctx, sprint_id, OrgRole.product_manager, "COMPLETED", change)

    async def cancel(self, ctx: OrgContext, sprint_id: UUID) -> SprintResponse:
        async def change(sprint: Sprint) -> dict[str, Any]:
            if sprint.status not in (SprintStatus.planned, SprintStatus.active):
                raise ValidationError(
                    f"A {sprint.status.value} sprint cannot be cancelled",
                    code="INVALID_STATUS",
                )
            old = sprint.status
            sprint.status = SprintStatus.cancelled
            return {"from": old, "to": sprint.status}

        return await self.mutate(ctx, sprint_id, OrgRole.product_manager, "CANCELLED", change)

    # -----------------------------------------------------------------------
    # Sprint scope
    # -----------------------------------------------------------------------

    async def add_tasks(
        self, ctx: OrgContext, sprint_id: UUID, task_ids: list[UUID]
    ) -> SprintResponse:
        async def change(sprint: Sprint) -> dict[str, Any]:
            if sprint.status in (SprintStatus.completed, SprintStatus.cancelled):
                raise ValidationError(
                    f"Cannot add tasks to a {sprint.status.value} sprint",
                    code="SPRINT_CLOSED",
                )
            wanted = set(task_ids)
            result = await self.db.execute(
                select(Task).where(
                    Task.id.in_(wanted),
                    Task.org_id == ctx.org.id,
                    Task.product_id == sprint.product_id,
                    Task.deleted_at.is_(None),
                )
            )
            tasks = list(result.scalars())
            if len(tasks) != len(wanted):
                raise ValidationError(
                    "Some tasks were not found in this product",
                    code="INVALID_TASKS",
                    field="task_ids",
                )
            for task in tasks:
                if task.sprint_id is not None and task.sprint_id != sprint.id:
                    self.touch(board_view(task.sprint_id))
                task.sprint_id = sprint.id
            self.touch(task_list_view(sprint.product_id))
            return {"task_ids": sorted(str(t.id) for t in tasks)}

        return await self.mutate(ctx, sprint_id, OrgRole.contributor, "TASKS_ADDED", change)

    async def remove_task(
        self, ctx: OrgContext, sprint_id: UUID, task_id: UUID
    ) -> SprintResponse:
        async def change(sprint: Sprint) -> dict[str, Any]:
            if sprint.status == SprintStatus.completed:
                raise ValidationError(
                    "Cannot remove tasks from a completed sprint", code="SPRINT_CLOSED"
                )
            task = await self.db.scalar(
                select(Task).where(
                    Task.id == task_id,
                    Task.sprint_id == sprint.id,
                    Task.deleted_at.is_(None),
                )
            )
            if task is None:
                raise NotFoundError("Task not found in this sprint", code="TASK_NOT_FOUND")
            task.sprint_id = None
            self.touch(task_list_view(sprint.product_id))
            return {"task_id": task.id}

        return await self.mutate(ctx, sprint_id, OrgRole.contributor, "TASK_REMOVED", change)

    # -----------------------------------------------------------------------
    # Board
    # -----------------------------------------------------------------------

    async def board(self, ctx: OrgContext, sprint_id: UUID) -> SprintBoardResponse:
        await self.authorize(ctx, self.read_role)
        sprint = await self.load(ctx, sprint_id)

        path = board_view(sprint.id)
        cached = await self.cache.get(ctx.org.id, path)
        if cached is not None:
            return SprintBoardResponse.model_validate(cached)

        tasks = [TaskResponse.model_validate(t) for t in await self._live_tasks(sprint)]
        columns = []
        for status in BOARD_COLUMNS:
            column_tasks = [t for t in tasks if t.status == status]
            columns.append(
                BoardColumn(
                    status=status,
                    tasks=column_tasks,
                    count=len(column_tasks),
                    effort=sum(t.effort or 0 for t in column_tasks),
                )
            )
        board = SprintBoardResponse(
            sprint=SprintResponse.model_validate(sprint),
            columns=columns,
            total_effort=sum(t.effort or 0 for t in tasks),
            completed_effort=sum(t.effort or 0 for t in tasks if t.status == TaskStatus.done),
        )
        await self.cache.set(ctx.org.id, path, board.model_dump(mode="json"))
        return board
