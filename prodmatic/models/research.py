"""
Customer research ORM models: customers, interviews and the insights drawn
from them.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
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


class InterviewStatus(str, enum.Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no_show"


class InsightSource(str, enum.Enum):
    interview = "interview"
    survey = "survey"
    analytics = "analytics"
    experiment = "experiment"
    feedback = "feedback"
    observation = "observation"


class InsightImpact(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class Customer(Base, UUIDMixin, OrgScopedMixin, ProductScopedMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "customers"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company: Mapped[str | None] = mapped_column(String(200), nullable=True)
    segment: Mapped[str | None] = mapped_column(String(100), nullable=True)
    attributes: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<Customer id={self.id} name={self.name!r}>"


class Interview(Base, UUIDMixin, OrgScopedMixin, ProductScopedMixin, TimestampMixin, SoftDeleteMixin):
    """A customer interview conducted by an organization member."""

    __tablename__ = "interviews"

    customer_id: Mapped[UUID] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status: Mapped[InterviewStatus] = mapped_column(
        enum_column(InterviewStatus, "interview_status"),
        nullable=False,
        default=InterviewStatus.scheduled,
    )
    objectives: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    questions: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    conductor_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)

    def __repr__(self) -> str:
        return f"<Interview id={self.id} title={self.title!r} status={self.status}>"


class Insight(Base, UUIDMixin, OrgScopedMixin, ProductScopedMixin, TimestampMixin, SoftDeleteMixin):
    """A finding recorded from an interview; carries the interview's product."""

    __tablename__ = "insights"

    interview_id: Mapped[UUID] = mapped_column(
        ForeignKey("interviews.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    source: Mapped[InsightSource] = mapped_column(
        enum_column(InsightSource, "insight_source"),
        nullable=False,
        default=InsightSource.interview,
    )
    impact: Mapped[InsightImpact] = mapped_column(
        enum_column(InsightImpact, "insight_impact"),
        nullable=False,
        default=InsightImpact.medium,
    )
    confidence: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    tags: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)

    def __repr__(self) -> str:
        return f"<Insight id={self.id} title={self.title!r} impact={self.impact}>"
