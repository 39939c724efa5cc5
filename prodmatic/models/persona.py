"""
Persona ORM model.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Boolean, String, Text
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


class Persona(Base, UUIDMixin, OrgScopedMixin, ProductScopedMixin, TimestampMixin, SoftDeleteMixin):
    """A target user archetype of a product."""

    __tablename__ = "personas"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    demographics: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    goals: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    pains: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    gains: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    behaviors: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    motivations: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    channels: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<Persona id={self.id} name={self.name!r} primary={self.is_primary}>"
