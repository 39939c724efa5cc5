"""
KPI ORM model.
"""

from __future__ import annotations

import enum
from uuid import UUID

from sqlalchemy import Boolean, Float, ForeignKey, String, Text
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


class KpiFrequency(str, enum.Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    quarterly = "quarterly"
    yearly = "yearly"


class Kpi(Base, UUIDMixin, OrgScopedMixin, ProductScopedMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "kpis"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    metric: Mapped[str] = mapped_column(String(200), nullable=False)
    target: Mapped[float] = mapped_column(Float, nullable=False)
    frequency: Mapped[KpiFrequency] = mapped_column(
        enum_column(KpiFrequency, "kpi_frequency"),
        nullable=False,
        default=KpiFrequency.monthly,
    )
    owner_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Kpi id={self.id} metric={self.metric!r} target={self.target}>"
