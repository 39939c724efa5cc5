"""
Experiment ORM model.
"""

from __future__ import annotations

import enum
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import Date, ForeignKey, String, Text
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


class ExperimentType(str, enum.Enum):
    ab_test = "ab_test"
    multivariate = "multivariate"
    feature_flag = "feature_flag"
    qualitative = "qualitative"


class ExperimentStatus(str, enum.Enum):
    draft = "draft"
    running = "running"
    completed = "completed"
    cancelled = "cancelled"
    paused = "paused"


class Experiment(Base, UUIDMixin, OrgScopedMixin, ProductScopedMixin, TimestampMixin, SoftDeleteMixin):
    """A product experiment with its variants and recorded outcome."""

    __tablename__ = "experiments"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    hypothesis: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[ExperimentType] = mapped_column(
        enum_column(ExperimentType, "experiment_type"),
        nullable=False,
        default=ExperimentType.ab_test,
    )
    status: Mapped[ExperimentStatus] = mapped_column(
        enum_column(ExperimentStatus, "experiment_status"),
        nullable=False,
        default=ExperimentStatus.draft,
    )
    audience: Mapped[str | None] = mapped_column(String(200), nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    owner_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    metrics: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    variants: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)
    results: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    conclusion: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)

    def __repr__(self) -> str:
        return f"<Experiment id={self.id} name={self.name!r} status={self.status}>"
