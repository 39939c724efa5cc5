"""
Feature flag ORM model.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import Boolean, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from prodmatic.models.base import (
    Base,
    JSONType,
    OrgScopedMixin,
    ProductScopedMixin,
    SoftDeleteMixin,
    TimestampMixin,
    UUIDMixin,
)


class FeatureFlag(Base, UUIDMixin, OrgScopedMixin, ProductScopedMixin, TimestampMixin, SoftDeleteMixin):
    """
    A runtime switch for a product feature.

    `rollout` is the share of traffic that sees the feature, from 0 to 1.
    Keys are unique among the live flags of a product.
    """

    __tablename__ = "feature_flags"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    key: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    rollout: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    targeting: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    variants: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)

    def __repr__(self) -> str:
        return f"<FeatureFlag id={self.id} key={self.key!r} enabled={self.enabled}>"
