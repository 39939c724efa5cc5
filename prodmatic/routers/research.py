"""
Customer research endpoints: customers, interviews and insights.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import OrgContext, get_guard, get_org_context, get_redis
from prodmatic.core.permissions import MembershipGuard
from prodmatic.schemas.research import (
    CustomerCreateRequest,
    CustomerListResponse,
    CustomerResponse,
    CustomerUpdateRequest,
    InsightCreateRequest,
    InsightListResponse,
    InsightResponse,
    InsightUpdateRequest,
    InterviewCreateRequest,
    InterviewListResponse,
    InterviewResponse,
    InterviewUpdateRequest,
)
from prodmatic.services.research_service import CustomerService, InsightService, InterviewService

router = APIRouter()


def get_customer_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> CustomerService:
    return CustomerService(db=db, redis=redis, guard=guard)


def get_interview_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> InterviewService:
    return InterviewService(db=db, redis=redis, guard=guard)


def get_insight_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> InsightService:
    return InsightService(db=db, redis=redis, guard=guard)


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------

@router.get(
    "/organizations/{slug}/products/{product_id}/customers",
    response_model=CustomerListResponse,
    summary="List customers of a product",
)
async def list_customers(
    product_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerListResponse:
    customers = await service.list_items(ctx, product_id)
    return CustomerListResponse(customers=customers, total=len(customers))


@router.post(
    "/organizations/{slug}/products/{product_id}/customers",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_customer(
    product_id: UUID,
    data: CustomerCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    return await service.create(ctx, data, product_id)


@router.get("/organizations/{slug}/customers/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    return await service.get(ctx, customer_id)


@router.patch("/organizations/{slug}/customers/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: UUID,
    data: CustomerUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    return await service.update(ctx, customer_id, data)


@router.delete("/organizations/{slug}/customers/{customer_id}", status_code=status.HTTP_200_OK)
async def delete_customer(
    customer_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: CustomerService = Depends(get_customer_service),
) -> dict:
    """Also deletes the customer's interviews and their insights."""
    await service.delete(ctx, customer_id)
    return {}


# ---------------------------------------------------------------------------
# Interviews
# ---------------------------------------------------------------------------

@router.get(
    "/organizations/{slug}/products/{product_id}/interviews",
    response_model=InterviewListResponse,
    summary="List interviews of a product",
)
async def list_interviews(
    product_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: InterviewService = Depends(get_interview_service),
) -> InterviewListResponse:
    interviews = await service.list_items(ctx, product_id)
    return InterviewListResponse(interviews=interviews, total=len(interviews))


@router.post(
    "/organizations/{slug}/products/{product_id}/interviews",
    response_model=InterviewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_interview(
    product_id: UUID,
    data: InterviewCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: InterviewService = Depends(get_interview_service),
) -> InterviewResponse:
    """Requires product manager. The caller becomes the conductor."""
    return await service.create(ctx, data, product_id)


@router.get("/organizations/{slug}/interviews/{interview_id}", response_model=InterviewResponse)
async def get_interview(
    interview_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: InterviewService = Depends(get_interview_service),
) -> InterviewResponse:
    return await service.get(ctx, interview_id)


@router.patch(
    "/organizations/{slug}/interviews/{interview_id}", response_model=InterviewResponse
)
async def update_interview(
    interview_id: UUID,
    data: InterviewUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: InterviewService = Depends(get_interview_service),
) -> InterviewResponse:
    return await service.update(ctx, interview_id, data)


@router.delete(
    "/organizations/{slug}/interviews/{interview_id}", status_code=status.HTTP_200_OK
)
async def delete_interview(
    interview_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: InterviewService = Depends(get_interview_service),
) -> dict:
    await service.delete(ctx, interview_id)
    return {}


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------

@router.get(
    "/organizations/{slug}/interviews/{interview_id}/insights",
    response_model=InsightListResponse,
    summary="List insights of an interview",
)
async def list_insights(
    interview_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: InsightService = Depends(get_insight_service),
) -> InsightListResponse:
    insights = await service.list_items(ctx, interview_id)
    return InsightListResponse(insights=insights, total=len(insights))


@router.post(
    "/organizations/{slug}/interviews/{interview_id}/insights",
    response_model=InsightResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_insight(
    interview_id: UUID,
    data: InsightCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: InsightService = Depends(get_insight_service),
) -> InsightResponse:
    return await service.create(ctx, data, interview_id)


@router.get("/organizations/{slug}/insights/{insight_id}", response_model=InsightResponse)
async def get_insight(
    insight_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: InsightService = Depends(get_insight_service),
) -> InsightResponse:
    return await service.get(ctx, insight_id)


@router.patch("/organizations/{slug}/insights/{insight_id}", response_model=InsightResponse)
async def update_insight(
    insight_id: UUID,
    data: InsightUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: InsightService = Depends(get_insight_service),
) -> InsightResponse:
    return await service.update(ctx, insight_id, data)


@router.delete("/organizations/{slug}/insights/{insight_id}", status_code=status.HTTP_200_OK)
async def delete_insight(
    insight_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: InsightService = Depends(get_insight_service),
) -> dict:
    await service.delete(ctx, insight_id)
    return {}
