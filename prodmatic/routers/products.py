"""
Product endpoints.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import OrgContext, get_guard, get_org_context, get_redis
from prodmatic.core.permissions import MembershipGuard
from prodmatic.schemas.product import (
    ProductCreateRequest,
    ProductLifecycleRequest,
    ProductListResponse,
    ProductResponse,
    ProductUpdateRequest,
)
from prodmatic.services.product_service import ProductService

router = APIRouter()


def get_product_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> ProductService:
    return ProductService(db=db, redis=redis, guard=guard)


@router.get(
    "/organizations/{slug}/products",
    response_model=ProductListResponse,
    summary="List products",
)
async def list_products(
    ctx: OrgContext = Depends(get_org_context),
    service: ProductService = Depends(get_product_service),
) -> ProductListResponse:
    products = await service.list_products(ctx)
    return ProductListResponse(products=products, total=len(products))


@router.post(
    "/organizations/{slug}/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
async def create_product(
    data: ProductCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    """Requires product manager. Keys are unique within the organization."""
    return await service.create(ctx, data)


@router.get(
    "/organizations/{slug}/products/{product_id}",
    response_model=ProductResponse,
    summary="Get a product",
)
async def get_product(
    product_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return await service.get(ctx, product_id)


@router.patch(
    "/organizations/{slug}/products/{product_id}",
    response_model=ProductResponse,
    summary="Update a product",
)
async def update_product(
    product_id: UUID,
    data: ProductUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return await service.update(ctx, product_id, data)


@router.put(
    "/organizations/{slug}/products/{product_id}/lifecycle",
    response_model=ProductResponse,
    summary="Move a product to another lifecycle stage",
)
async def set_product_lifecycle(
    product_id: UUID,
    data: ProductLifecycleRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return await service.set_lifecycle(ctx, product_id, data.lifecycle)


@router.delete(
    "/organizations/{slug}/products/{product_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a product",
)
async def delete_product(
    product_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: ProductService = Depends(get_product_service),
) -> dict:
    """Soft delete. Requires admin."""
    await service.delete(ctx, product_id)
    return {}
