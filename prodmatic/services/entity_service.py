"""
Generic entity service.

Every entity mutation runs the same pipeline:

    authorize -> load -> validate + write -> record -> commit -> invalidate

Entity services declare their model, audit label, minimum roles and parent;
they only add code for behaviour that is genuinely theirs (voting, sprint
lifecycle, key result progress, ...). The audit entry is flushed into the
same transaction as the write, so either both are committed or neither is.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, ClassVar, Generic, Iterable, TypeVar
from uuid import UUID

import redis.asyncio as aioredis
from pydantic import BaseModel
from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.cache import ViewCache
from prodmatic.core.dependencies import OrgContext
from prodmatic.core.errors import ValidationError, not_found
from prodmatic.core.permissions import MembershipGuard
from prodmatic.models.base import Base, utcnow
from prodmatic.models.member import OrgMember, OrgRole
from prodmatic.models.product import Product
from prodmatic.services.activity_service import ActivityRecorder

ModelT = TypeVar("ModelT", bound=Base)

# A change applies itself to a loaded entity and returns the audit metadata
Change = Callable[[Any], Awaitable[dict[str, Any] | None]]


def live_clauses(model: type[Base]) -> list[Any]:
    """Filters keeping rows that are not deleted and whose product is not deleted."""
    clauses: list[Any] = [model.deleted_at.is_(None)]
    if model is not Product and "product_id" in model.__table__.c:
        clauses.append(
            select(Product.id)
            .where(Product.id == model.product_id, Product.deleted_at.is_(None))
            .exists()
        )
    return clauses


class EntityService(Generic[ModelT]):
    """Shared CRUD, transition and bulk pipeline for org-scoped, soft-deletable entities."""

    model: ClassVar[type[Base]]
    entity_type: ClassVar[str]
    response_schema: ClassVar[type[BaseModel]]

    parent_model: ClassVar[type[Base] | None] = Product
    parent_field: ClassVar[str | None] = "product_id"
    parent_label: ClassVar[str] = "product"
    owner_field: ClassVar[str | None] = None
    label_field: ClassVar[str] = "title"

    read_role: ClassVar[OrgRole] = OrgRole.stakeholder
    create_role: ClassVar[OrgRole] = OrgRole.contributor
    update_role: ClassVar[OrgRole] = OrgRole.contributor
    transition_role: ClassVar[OrgRole] = OrgRole.contributor
    delete_role: ClassVar[OrgRole] = OrgRole.product_manager
    bulk_role: ClassVar[OrgRole] = OrgRole.product_manager

    def __init__(
        self,
        db: AsyncSession,
        redis: aioredis.Redis,
        guard: MembershipGuard | None = None,
    ) -> None:
        self.db = db
        self.redis = redis
        self.guard = guard or MembershipGuard(db)
        self.activity = ActivityRecorder(db)
        self.cache = ViewCache(redis)
        self._pending_views: set[str] = set()

    # -----------------------------------------------------------------------
    # Views
    # -----------------------------------------------------------------------

    def list_view(self, parent_id: UUID) -> str:
        return f"{self.parent_label}s/{parent_id}/{self.model.__tablename__}"

    def views_for(self, entity: ModelT) -> set[str]:
        """Cached views whose content depends on this entity."""
        if self.parent_field is None:
            return set()
        return {self.list_view(getattr(entity, self.parent_field))}

    def touch(self, *views: str) -> None:
        """Mark extra views as stale; they are invalidated on the next commit."""
        self._pending_views.update(views)

    # -----------------------------------------------------------------------
    # Authorization and loading
    # -----------------------------------------------------------------------

    async def authorize(
        self, ctx: OrgContext, minimum: OrgRole, *, owner_id: UUID | None = None
    ) -> OrgMember:
        if owner_id is not None:
            return await self.guard.require_role_or_owner(
                ctx.user.id, ctx.org.id, minimum, owner_id
            )
        return await self.guard.require_role(ctx.user.id, ctx.org.id, minimum)

    def live_filters(self) -> list[Any]:
        """The row is not deleted and neither is any parent above it."""
        filters = live_clauses(self.model)
        if self.parent_model is not None and self.parent_model is not Product:
            parent = self.parent_model
            filters.append(
                select(parent.id)
                .where(
                    parent.id == getattr(self.model, self.parent_field),
                    *live_clauses(parent),
                )
                .exists()
            )
        return filters

    def scoped(self) -> Select:
        return select(self.model).where(*self.live_filters())

    async def load(self, ctx: OrgContext, entity_id: UUID) -> ModelT:
        """Live entity of this organization, or NotFoundError."""
        result = await self.db.execute(
            self.scoped().where(
                self.model.id == entity_id,
                self.model.org_id == ctx.org.id,
            )
        )
        entity = result.scalar_one_or_none()
        if entity is None:
            raise not_found(self.entity_type.lower())
        return entity

    async def load_parent(self, ctx: OrgContext, parent_id: UUID) -> Base:
        result = await self.db.execute(
            select(self.parent_model).where(
                self.parent_model.id == parent_id,
                self.parent_model.org_id == ctx.org.id,
                *live_clauses(self.parent_model),
            )
        )
        parent = result.scalar_one_or_none()
        if parent is None:
            raise not_found(self.parent_label)
        return parent

    async def load_authorized(
        self,
        ctx: OrgContext,
        entity_id: UUID,
        minimum: OrgRole,
        *,
        allow_owner: bool = False,
    ) -> ModelT:
        """
        Authorize then load. When the owner may bypass the role the entity
        must be loaded first, so membership is checked before anything is read.
        """
        if self.owner_field is None or not allow_owner:
            await self.authorize(ctx, minimum)
            return await self.load(ctx, entity_id)

        await self.authorize(ctx, OrgRole.stakeholder)
        entity = await self.load(ctx, entity_id)
        await self.authorize(ctx, minimum, owner_id=getattr(entity, self.owner_field))
        return entity

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    async def present(self, entity: ModelT) -> BaseModel:
        return self.response_schema.model_validate(entity)

    def ordering(self) -> list[Any]:
        return [self.model.created_at, self.model.id]

    def sort_responses(self, items: list[BaseModel]) -> list[BaseModel]:
        return items

    async def get(self, ctx: OrgContext, entity_id: UUID) -> BaseModel:
        await self.authorize(ctx, self.read_role)
        return await self.present(await self.load(ctx, entity_id))

    async def list_items(
        self, ctx: OrgContext, parent_id: UUID, **filters: Any
    ) -> list[BaseModel]:
        """
        Live children of a parent. Unfiltered lists are served from and
        stored into the view cache.
        """
        await self.authorize(ctx, self.read_role)
        await self.load_parent(ctx, parent_id)

        active = {k: v for k, v in filters.items() if v is not None}
        path = self.list_view(parent_id)
        if not active:
            cached = await self.cache.get(ctx.org.id, path)
            if cached is not None:
                return [self.response_schema.model_validate(item) for item in cached]

        stmt = self.scoped().where(
            self.model.org_id == ctx.org.id,
            getattr(self.model, self.parent_field) == parent_id,
            *(getattr(self.model, field) == value for field, value in active.items()),
        )
        result = await self.db.execute(stmt.order_by(*self.ordering()))
        items = self.sort_responses([await self.present(e) for e in result.scalars()])

        if not active:
            await self.cache.set(ctx.org.id, path, [i.model_dump(mode="json") for i in items])
        return items

    # -----------------------------------------------------------------------
    # Hooks
    # -----------------------------------------------------------------------

    async def validate_values(
        self, ctx: OrgContext, values: dict[str, Any], entity: ModelT | None
    ) -> None:
        """Domain validation of incoming values. Raise ValidationError."""

    async def validate_transition(
        self, ctx: OrgContext, entity: ModelT, old: Any, new: Any
    ) -> None:
        """Reject illegal state changes. Raise ValidationError."""

    async def on_delete(self, ctx: OrgContext, entity: ModelT) -> None:
        """Cascade a soft delete to dependent rows."""

    def describe(self, entity: ModelT) -> dict[str, Any]:
        return {self.label_field: getattr(entity, self.label_field)}

    # -----------------------------------------------------------------------
    # Pipeline
    # -----------------------------------------------------------------------

    async def record(
        self,
        ctx: OrgContext,
        action: str,
        entity: Base,
        metadata: dict[str, Any] | None = None,
        *,
        entity_type: str | None = None,
    ) -> None:
        entity_type = entity_type or self.entity_type
        await self.activity.log_activity(
            actor_id=ctx.user.id,
            org_id=ctx.org.id,
            action=f"{entity_type}_{action}",
            entity_type=entity_type,
            entity_id=entity.id,
            metadata=metadata,
        )

    async def commit(self, ctx: OrgContext, views: Iterable[str]) -> None:
        """Commit the unit of work, then signal the dependent views."""
        await self.db.commit()
        stale = set(views) | self._pending_views
        self._pending_views.clear()
        await self.cache.invalidate(ctx.org.id, stale)

    async def finish(
        self,
        ctx: OrgContext,
        entity: ModelT,
        action: str,
        metadata: dict[str, Any] | None,
        views: Iterable[str] = (),
    ) -> BaseModel:
        await self.record(ctx, action, entity, metadata)
        await self.commit(ctx, self.views_for(entity) | set(views))
        return await self.present(entity)

    async def insert(self, ctx: OrgContext, values: dict[str, Any]) -> ModelT:
        entity = self.model(org_id=ctx.org.id, **values)
        self.db.add(entity)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def create(
        self, ctx: OrgContext, data: BaseModel, parent_id: UUID | None = None
    ) -> BaseModel:
        await self.authorize(ctx, self.create_role)
        values = data.model_dump()
        if self.parent_model is not None:
            await self.load_parent(ctx, parent_id)
            values[self.parent_field] = parent_id
        if "created_by" in self.model.__table__.c:
            values["created_by"] = ctx.user.id
        await self.validate_values(ctx, values, None)

        entity = await self.insert(ctx, values)
        return await self.finish(ctx, entity, "CREATED", self.describe(entity))

    async def mutate(
        self,
        ctx: OrgContext,
        entity_id: UUID,
        minimum: OrgRole,
        action: str,
        change: Change,
        *,
        allow_owner: bool = False,
    ) -> BaseModel:
        """Run one change through the pipeline; the base of every mutation."""
        entity = await self.load_authorized(
            ctx, entity_id, minimum, allow_owner=allow_owner
        )
        views_before = self.views_for(entity)

        metadata = await change(entity)
        await self.db.flush()
        await self.db.refresh(entity)
        return await self.finish(ctx, entity, action, metadata, views_before)

    def apply_changes(self, entity: ModelT, changes: dict[str, Any]) -> dict[str, Any]:
        """Set changed fields and return {field: {old, new}}."""
        columns = self.model.__table__.c
        for field, value in changes.items():
            if value is None and not columns[field].nullable:
                raise ValidationError(f"{field} cannot be null", field=field)

        diff: dict[str, Any] = {}
        for field, value in changes.items():
            old = getattr(entity, field)
            if old != value:
                setattr(entity, field, value)
                diff[field] = {"old": old, "new": value}
        return diff

    async def update(self, ctx: OrgContext, entity_id: UUID, data: BaseModel) -> BaseModel:
        changes = data.model_dump(exclude_unset=True)

        async def apply(entity: ModelT) -> dict[str, Any]:
            await self.validate_values(ctx, changes, entity)
            return {"changes": self.apply_changes(entity, changes)}

        return await self.mutate(
            ctx, entity_id, self.update_role, "UPDATED", apply, allow_owner=True
        )

    async def transition(
        self,
        ctx: OrgContext,
        entity_id: UUID,
        new_value: Any,
        *,
        field: str = "status",
        minimum: OrgRole | None = None,
        action: str = "STATUS_CHANGED",
        allow_owner: bool = False,
    ) -> BaseModel:
        async def change(entity: ModelT) -> dict[str, Any]:
            old = getattr(entity, field)
            await self.validate_transition(ctx, entity, old, new_value)
            setattr(entity, field, new_value)
            return {"field": field, "from": old, "to": new_value}

        return await self.mutate(
            ctx,
            entity_id,
            minimum or self.transition_role,
            action,
            change,
            allow_owner=allow_owner,
        )

    async def delete(self, ctx: OrgContext, entity_id: UUID) -> None:
        async def soft_delete(entity: ModelT) -> dict[str, Any]:
            entity.deleted_at = utcnow()
            await self.on_delete(ctx, entity)
            return self.describe(entity)

        await self.mutate(
            ctx, entity_id, self.delete_role, "DELETED", soft_delete, allow_owner=True
        )

    async def bulk_update(
        self, ctx: OrgContext, entity_ids: list[UUID], changes: dict[str, Any]
    ) -> int:
        """
        Apply the same changes to many entities with one UPDATE.

        Ids that are unknown, deleted, under a deleted product or owned by
        another organization are skipped. One audit entry is written per
        affected entity.
        """
        await self.authorize(ctx, self.bulk_role)
        if not changes:
            raise ValidationError("No fields to update", code="EMPTY_UPDATE")

        where = (
            self.model.id.in_(entity_ids),
            self.model.org_id == ctx.org.id,
            *self.live_filters(),
        )
        matched = list((await self.db.execute(select(self.model).where(*where))).scalars())
        if not matched:
            return 0

        columns = self.model.__table__.c
        for field, value in changes.items():
            if value is None and not columns[field].nullable:
                raise ValidationError(f"{field} cannot be null", field=field)
        for entity in matched:
            await self.validate_values(ctx, changes, entity)

        views: set[str] = set()
        for entity in matched:
            views |= self.views_for(entity)

        await self.db.execute(
            update(self.model).where(*where).values(**changes, updated_at=utcnow())
        )
        for entity in matched:
            await self.db.refresh(entity)
            views |= self.views_for(entity)
            await self.record(
                ctx,
                "BULK_UPDATED",
                entity,
                {"changes": changes, "batch_size": len(matched)},
            )

        await self.commit(ctx, views)
        return len(matched)
