"""
Experiment endpoints.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import OrgContext, get_guard, get_org_context, get_redis
from prodmatic.core.permissions import MembershipGuard
from prodmatic.schemas.experiment import (
    ExperimentCreateRequest,
    ExperimentListResponse,
    ExperimentResponse,
    ExperimentStatusUpdateRequest,
    ExperimentUpdateRequest,
)
from prodmatic.services.experiment_service import ExperimentService

router = APIRouter()


def get_experiment_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> ExperimentService:
    return ExperimentService(db=db, redis=redis, guard=guard)


@router.get(
    "/organizations/{slug}/products/{product_id}/experiments",
    response_model=ExperimentListResponse,
    summary="List experiments of a product",
)
async def list_experiments(
    product_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: ExperimentService = Depends(get_experiment_service),
) -> ExperimentListResponse:
    experiments = await service.list_items(ctx, product_id)
    return ExperimentListResponse(experiments=experiments, total=len(experiments))


@router.post(
    "/organizations/{slug}/products/{product_id}/experiments",
    response_model=ExperimentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_experiment(
    product_id: UUID,
    data: ExperimentCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: ExperimentService = Depends(get_experiment_service),
) -> ExperimentResponse:
    return await service.create(ctx, data, product_id)


@router.get(
    "/organizations/{slug}/experiments/{experiment_id}", response_model=ExperimentResponse
)
async def get_experiment(
    experiment_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: ExperimentService = Depends(get_experiment_service),
) -> ExperimentResponse:
    return await service.get(ctx, experiment_id)


@router.patch(
    "/organizations/{slug}/experiments/{experiment_id}", response_model=ExperimentResponse
)
async def update_experiment(
    experiment_id: UUID,
    data: ExperimentUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: ExperimentService = Depends(get_experiment_service),
) -> ExperimentResponse:
    return await service.update(ctx, experiment_id, data)


@router.put(
    "/organizations/{slug}/experiments/{experiment_id}/status",
    response_model=ExperimentResponse,
)
async def set_experiment_status(
    experiment_id: UUID,
    data: ExperimentStatusUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: ExperimentService = Depends(get_experiment_service),
) -> ExperimentResponse:
    """Starting stamps the start date, completing stamps the end date, if unset."""
    return await service.set_status(ctx, experiment_id, data.status)


@router.delete(
    "/organizations/{slug}/experiments/{experiment_id}", status_code=status.HTTP_200_OK
)
async def delete_experiment(
    experiment_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: ExperimentService = Depends(get_experiment_service),
) -> dict:
    await service.delete(ctx, experiment_id)
    return {}
