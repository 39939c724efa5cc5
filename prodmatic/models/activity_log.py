"""
ActivityLog ORM model.

Rows are append-only: the ORM refuses to flush an UPDATE or DELETE for them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, String, event
from sqlalchemy.orm import Mapped, mapped_column

from prodmatic.models.base import Base, JSONType, UUIDMixin, utcnow


class ActivityLog(Base, UUIDMixin):
    """Immutable audit entry: who did what to which entity."""

    __tablename__ = "activity_log"
    __table_args__ = (
        Index("ix_activity_log_entity", "entity_type", "entity_id"),
    )

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    actor_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[UUID] = mapped_column(nullable=False)
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSONType, nullable=False, default=dict
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<ActivityLog id={self.id} action={self.action!r} entity_id={self.entity_id}>"


class ImmutableActivityError(RuntimeError):
    pass


@event.listens_for(ActivityLog, "before_update")
def _reject_update(mapper, connection, target: ActivityLog) -> None:
    raise ImmutableActivityError(f"Activity entry {target.id} is append-only")


@event.listens_for(ActivityLog, "before_delete")
def _reject_delete(mapper, connection, target: ActivityLog) -> None:
    raise ImmutableActivityError(f"Activity entry {target.id} is append-only")
