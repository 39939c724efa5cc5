"""
Product ORM model.
"""

from __future__ import annotations

import enum
from uuid import UUID

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from prodmatic.models.base import (
    Base,
    OrgScopedMixin,
    SoftDeleteMixin,
    TimestampMixin,
    UUIDMixin,
    enum_column,
)


class ProductLifecycle(str, enum.Enum):
    ideation = "ideation"
    discovery = "discovery"
    definition = "definition"
    delivery = "delivery"
    launch = "launch"
    growth = "growth"
    maturity = "maturity"
    sunset = "sunset"


class Product(Base, UUIDMixin, OrgScopedMixin, TimestampMixin, SoftDeleteMixin):
    """A product owned by an organization. Parent of all planning entities."""

    __tablename__ = "products"
    __table_args__ = (
        UniqueConstraint("org_id", "key", name="uq_products_org_key"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    key: Mapped[str] = mapped_column(String(10), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    vision: Mapped[str | None] = mapped_column(Text, nullable=True)
    lifecycle: Mapped[ProductLifecycle] = mapped_column(
        enum_column(ProductLifecycle, "product_lifecycle"),
        nullable=False,
        default=ProductLifecycle.ideation,
    )
    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)

    def __repr__(self) -> str:
        return f"<Product id={self.id} key={self.key!r}>"
