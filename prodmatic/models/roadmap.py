"""
Roadmap item ORM model.
"""

from __future__ import annotations

import enum
from datetime import date
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from prodmatic.models.base import (
    Base,
    OrgScopedMixin,
    ProductScopedMixin,
    SoftDeleteMixin,
    TimestampMixin,
    UUIDMixin,
    enum_column,
)


class RoadmapItemType(str, enum.Enum):
    epic = "epic"
    feature = "feature"
    initiative = "initiative"
    milestone = "milestone"


class RoadmapStatus(str, enum.Enum):
    planned = "planned"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"
    on_hold = "on_hold"


class RoadmapLane(str, enum.Enum):
    now = "now"
    next = "next"
    later = "later"
    parked = "parked"


class RoadmapItem(Base, UUIDMixin, OrgScopedMixin, ProductScopedMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "roadmap_items"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[RoadmapItemType] = mapped_column(
        enum_column(RoadmapItemType, "roadmap_item_type"),
        nullable=False,
        default=RoadmapItemType.feature,
    )
    status: Mapped[RoadmapStatus] = mapped_column(
        enum_column(RoadmapStatus, "roadmap_status"),
        nullable=False,
        default=RoadmapStatus.planned,
    )
    lane: Mapped[RoadmapLane] = mapped_column(
        enum_column(RoadmapLane, "roadmap_lane"), nullable=False, default=RoadmapLane.later
    )
    quarter: Mapped[str | None] = mapped_column(String(10), nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    effort: Mapped[int | None] = mapped_column(Integer, nullable=True)
    confidence: Mapped[int | None] = mapped_column(Integer, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)

    def __repr__(self) -> str:
        return f"<RoadmapItem id={self.id} lane={self.lane} title={self.title!r}>"
