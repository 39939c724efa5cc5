"""
Document schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from prodmatic.models.document import DocumentStatus, DocumentType


class DocumentCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    type: DocumentType = DocumentType.prd
    template: str | None = Field(default=None, max_length=100)


class DocumentUpdateRequest(BaseModel):
    """Status moves go through the review endpoints, not through updates."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    content: str | None = Field(default=None, min_length=1)
    type: DocumentType | None = None


class DocumentReviewRequest(BaseModel):
    decision: Literal["approve", "reject"]
    comment: str | None = Field(default=None, max_length=2000)


class DocumentResponse(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    title: str
    content: str
    type: DocumentType
    status: DocumentStatus
    template: str | None
    version: int
    review_comment: str | None
    author_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DocumentListResponse(BaseModel):
    documents: list[DocumentResponse]
    total: int
