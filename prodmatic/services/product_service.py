"""
Product business logic.

Products are the parent of every planning entity; keys are unique per
organization, including keys of deleted products.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import select

from prodmatic.core.dependencies import OrgContext
from prodmatic.core.errors import ConflictError
from prodmatic.models.member import OrgRole
from prodmatic.models.product import Product, ProductLifecycle
from prodmatic.schemas.product import ProductResponse
from prodmatic.services.entity_service import EntityService

PRODUCTS_VIEW = "products"


class ProductService(EntityService[Product]):
    """Handles all product operations."""

    model = Product
    entity_type = "PRODUCT"
    response_schema = ProductResponse
    parent_model = None
    parent_field = None
    label_field = "name"

    create_role = OrgRole.product_manager
    update_role = OrgRole.product_manager
    transition_role = OrgRole.product_manager
    delete_role = OrgRole.admin

    def views_for(self, entity: Product) -> set[str]:
        return {PRODUCTS_VIEW}

    def describe(self, entity: Product) -> dict[str, Any]:
        return {"name": entity.name, "key": entity.key}

    async def validate_values(
        self, ctx: OrgContext, values: dict[str, Any], entity: Product | None
    ) -> None:
        key = values.get("key")
        if key is None or (entity is not None and key == entity.key):
            return
        existing = await self.db.scalar(
            select(Product.id).where(Product.org_id == ctx.org.id, Product.key == key)
        )
        if existing is not None:
            raise ConflictError(
                f"Product key {key} is already in use", code="KEY_TAKEN", field="key"
            )

    async def list_products(self, ctx: OrgContext) -> list[ProductResponse]:
        await self.authorize(ctx, self.read_role)

        cached = await self.cache.get(ctx.org.id, PRODUCTS_VIEW)
        if cached is not None:
            return [ProductResponse.model_validate(item) for item in cached]

        result = await self.db.execute(
            self.scoped().where(Product.org_id == ctx.org.id).order_by(Product.name)
        )
        products = [ProductResponse.model_validate(p) for p in result.scalars()]
        await self.cache.set(
            ctx.org.id, PRODUCTS_VIEW, [p.model_dump(mode="json") for p in products]
        )
        return products

    async def set_lifecycle(
        self, ctx: OrgContext, product_id: UUID, lifecycle: ProductLifecycle
    ) -> ProductResponse:
        return await self.transition(
            ctx, product_id, lifecycle, field="lifecycle", action="LIFECYCLE_CHANGED"
        )
