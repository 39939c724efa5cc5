"""
Persona endpoints.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import OrgContext, get_guard, get_org_context, get_redis
from prodmatic.core.permissions import MembershipGuard
from prodmatic.schemas.persona import (
    PersonaCreateRequest,
    PersonaListResponse,
    PersonaPrimaryRequest,
    PersonaResponse,
    PersonaUpdateRequest,
)
from prodmatic.services.persona_service import PersonaService

router = APIRouter()


def get_persona_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> PersonaService:
    return PersonaService(db=db, redis=redis, guard=guard)


@router.get(
    "/organizations/{slug}/products/{product_id}/personas",
    response_model=PersonaListResponse,
    summary="List personas of a product",
)
async def list_personas(
    product_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: PersonaService = Depends(get_persona_service),
) -> PersonaListResponse:
    """Primary personas come first, then by name."""
    personas = await service.list_items(ctx, product_id)
    return PersonaListResponse(personas=personas, total=len(personas))


@router.post(
    "/organizations/{slug}/products/{product_id}/personas",
    response_model=PersonaResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_persona(
    product_id: UUID,
    data: PersonaCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: PersonaService = Depends(get_persona_service),
) -> PersonaResponse:
    return await service.create(ctx, data, product_id)


@router.get("/organizations/{slug}/personas/{persona_id}", response_model=PersonaResponse)
async def get_persona(
    persona_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: PersonaService = Depends(get_persona_service),
) -> PersonaResponse:
    return await service.get(ctx, persona_id)


@router.patch("/organizations/{slug}/personas/{persona_id}", response_model=PersonaResponse)
async def update_persona(
    persona_id: UUID,
    data: PersonaUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: PersonaService = Depends(get_persona_service),
) -> PersonaResponse:
    return await service.update(ctx, persona_id, data)


@router.put(
    "/organizations/{slug}/personas/{persona_id}/primary", response_model=PersonaResponse
)
async def set_persona_primary(
    persona_id: UUID,
    data: PersonaPrimaryRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: PersonaService = Depends(get_persona_service),
) -> PersonaResponse:
    return await service.set_primary(ctx, persona_id, data.is_primary)


@router.post(
    "/organizations/{slug}/personas/{persona_id}/duplicate",
    response_model=PersonaResponse,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_persona(
    persona_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: PersonaService = Depends(get_persona_service),
) -> PersonaResponse:
    return await service.duplicate(ctx, persona_id)


@router.delete("/organizations/{slug}/personas/{persona_id}", status_code=status.HTTP_200_OK)
async def delete_persona(
    persona_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: PersonaService = Depends(get_persona_service),
) -> dict:
    await service.delete(ctx, persona_id)
    return {}
