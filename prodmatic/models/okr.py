"""
OKR and key result ORM models.
"""

from __future__ import annotations

import enum
from uuid import UUID

from sqlalchemy import Float, ForeignKey, Integer, String, Text
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


class OkrStatus(str, enum.Enum):
    active = "active"
    completed = "completed"
    cancelled = "cancelled"
    archived = "archived"


class KeyResultType(str, enum.Enum):
    increase = "increase"
    decrease = "decrease"
    maintain = "maintain"
    binary = "binary"


class KeyResultStatus(str, enum.Enum):
    active = "active"
    completed = "completed"
    at_risk = "at_risk"
    cancelled = "cancelled"


class Okr(Base, UUIDMixin, OrgScopedMixin, ProductScopedMixin, TimestampMixin, SoftDeleteMixin):
    """A quarterly objective measured by its key results."""

    __tablename__ = "okrs"

    objective: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    quarter: Mapped[str] = mapped_column(String(2), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    owner_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[OkrStatus] = mapped_column(
        enum_column(OkrStatus, "okr_status"), nullable=False, default=OkrStatus.active
    )
    progress: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)

    def __repr__(self) -> str:
        return f"<Okr id={self.id} {self.quarter} {self.year} progress={self.progress:.2f}>"


class KeyResult(Base, UUIDMixin, OrgScopedMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "key_results"

    okr_id: Mapped[UUID] = mapped_column(
        ForeignKey("okrs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(String(300), nullable=False)
    target: Mapped[float] = mapped_column(Float, nullable=False)
    current: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    type: Mapped[KeyResultType] = mapped_column(
        enum_column(KeyResultType, "key_result_type"),
        nullable=False,
        default=KeyResultType.increase,
    )
    status: Mapped[KeyResultStatus] = mapped_column(
        enum_column(KeyResultStatus, "key_result_status"),
        nullable=False,
        default=KeyResultStatus.active,
    )

    def __repr__(self) -> str:
        return f"<KeyResult id={self.id} {self.current}/{self.target}>"
