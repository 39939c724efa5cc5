"""
Product schemas.
"""

from __future__ import annotations

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from prodmatic.models.product import ProductLifecycle

KEY_PATTERN = re.compile(r"^[A-Z0-9]{2,10}$")


def _normalize_key(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip().upper()
    if not KEY_PATTERN.match(v):
        raise ValueError("Key must be 2-10 uppercase letters or digits")
    return v


class ProductCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    key: str
    description: str | None = None
    vision: str | None = None
    lifecycle: ProductLifecycle = ProductLifecycle.ideation

    @field_validator("key")
    @classmethod
    def key_must_be_valid(cls, v: str) -> str:
        return _normalize_key(v)


class ProductUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    key: str | None = None
    description: str | None = None
    vision: str | None = None

    @field_validator("key")
    @classmethod
    def key_must_be_valid(cls, v: str | None) -> str | None:
        return _normalize_key(v)


class ProductLifecycleRequest(BaseModel):
    lifecycle: ProductLifecycle


class ProductResponse(BaseModel):
    id: UUID
    org_id: UUID
    name: str
    key: str
    description: str | None
    vision: str | None
    lifecycle: ProductLifecycle
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    total: int
