"""
Idea ORM model.
"""

from __future__ import annotations

import enum
from uuid import UUID

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from prodmatic.models.base import (
    Base,
    JSONType,
    OrgScopedMixin,
    ProductScopedMixin,
    SoftDeleteMixin,
    TimestampMixin,
    UUIDMixin,
    enum_column,
)


class IdeaStatus(str, enum.Enum):
    submitted = "submitted"
    reviewing = "reviewing"
    approved = "approved"
    rejected = "rejected"
    converted = "converted"


class IdeaPriority(str, enum.Enum):
    high = "high"
    medium = "medium"
    low = "low"


class Idea(Base, UUIDMixin, OrgScopedMixin, ProductScopedMixin, TimestampMixin, SoftDeleteMixin):
    """A product idea with RICE inputs scored 1-5."""

    __tablename__ = "ideas"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    problem: Mapped[str | None] = mapped_column(Text, nullable=True)
    hypothesis: Mapped[str | None] = mapped_column(Text, nullable=True)
    source: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    priority: Mapped[IdeaPriority] = mapped_column(
        enum_column(IdeaPriority, "idea_priority"), nullable=False, default=IdeaPriority.medium
    )
    status: Mapped[IdeaStatus] = mapped_column(
        enum_column(IdeaStatus, "idea_status"), nullable=False, default=IdeaStatus.submitted
    )
    reach: Mapped[int | None] = mapped_column(Integer, nullable=True)
    impact: Mapped[int | None] = mapped_column(Integer, nullable=True)
    confidence: Mapped[int | None] = mapped_column(Integer, nullable=True)
    effort: Mapped[int | None] = mapped_column(Integer, nullable=True)
    votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Idea id={self.id} title={self.title!r} status={self.status}>"
