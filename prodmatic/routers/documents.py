"""
Document endpoints.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.database import get_db
from prodmatic.core.dependencies import OrgContext, get_guard, get_org_context, get_redis
from prodmatic.core.permissions import MembershipGuard
from prodmatic.models.document import DocumentStatus, DocumentType
from prodmatic.schemas.document import (
    DocumentCreateRequest,
    DocumentListResponse,
    DocumentResponse,
    DocumentReviewRequest,
    DocumentUpdateRequest,
)
from prodmatic.services.document_service import DocumentService

router = APIRouter()


def get_document_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    guard: MembershipGuard = Depends(get_guard),
) -> DocumentService:
    return DocumentService(db=db, redis=redis, guard=guard)


@router.get(
    "/organizations/{slug}/products/{product_id}/documents",
    response_model=DocumentListResponse,
    summary="List documents of a product",
)
async def list_documents(
    product_id: UUID,
    status_filter: DocumentStatus | None = Query(default=None, alias="status"),
    type_filter: DocumentType | None = Query(default=None, alias="type"),
    ctx: OrgContext = Depends(get_org_context),
    service: DocumentService = Depends(get_document_service),
) -> DocumentListResponse:
    documents = await service.list_items(
        ctx, product_id, status=status_filter, type=type_filter
    )
    return DocumentListResponse(documents=documents, total=len(documents))


@router.post(
    "/organizations/{slug}/products/{product_id}/documents",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_document(
    product_id: UUID,
    data: DocumentCreateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    return await service.create(ctx, data, product_id)


@router.get("/organizations/{slug}/documents/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    return await service.get(ctx, document_id)


@router.patch("/organizations/{slug}/documents/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: UUID,
    data: DocumentUpdateRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """Changing the content bumps the version."""
    return await service.update(ctx, document_id, data)


@router.post(
    "/organizations/{slug}/documents/{document_id}/submit", response_model=DocumentResponse
)
async def submit_document(
    document_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    return await service.submit_for_review(ctx, document_id)


@router.post(
    "/organizations/{slug}/documents/{document_id}/review", response_model=DocumentResponse
)
async def review_document(
    document_id: UUID,
    data: DocumentReviewRequest,
    ctx: OrgContext = Depends(get_org_context),
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    return await service.review(ctx, document_id, data.decision, data.comment)


@router.post(
    "/organizations/{slug}/documents/{document_id}/archive", response_model=DocumentResponse
)
async def archive_document(
    document_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    return await service.archive(ctx, document_id)


@router.post(
    "/organizations/{slug}/documents/{document_id}/duplicate",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_document(
    document_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    return await service.duplicate(ctx, document_id)


@router.delete("/organizations/{slug}/documents/{document_id}", status_code=status.HTTP_200_OK)
async def delete_document(
    document_id: UUID,
    ctx: OrgContext = Depends(get_org_context),
    service: DocumentService = Depends(get_document_service),
) -> dict:
    await service.delete(ctx, document_id)
    return {}
