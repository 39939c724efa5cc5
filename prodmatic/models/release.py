"""
Release, launch checklist and changelog ORM models.
"""

from __future__ import annotations

import enum
from datetime import date, datetime
from uuid import UUID

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, String, Text
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


class ReleaseType(str, enum.Enum):
    major = "major"
    minor = "minor"
    patch = "patch"
    hotfix = "hotfix"


class ReleaseStatus(str, enum.Enum):
    planned = "planned"
    in_progress = "in_progress"
    released = "released"
    cancelled = "cancelled"


class ChecklistCategory(str, enum.Enum):
    preparation = "preparation"
    testing = "testing"
    deployment = "deployment"
    monitoring = "monitoring"
    communication = "communication"
    rollback = "rollback"


class Release(Base, UUIDMixin, OrgScopedMixin, ProductScopedMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "releases"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    version: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[ReleaseType] = mapped_column(
        enum_column(ReleaseType, "release_type"), nullable=False, default=ReleaseType.minor
    )
    status: Mapped[ReleaseStatus] = mapped_column(
        enum_column(ReleaseStatus, "release_status"),
        nullable=False,
        default=ReleaseStatus.planned,
    )
    release_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)

    def __repr__(self) -> str:
        return f"<Release id={self.id} version={self.version!r} status={self.status}>"


class ChecklistItem(Base, UUIDMixin, OrgScopedMixin, TimestampMixin, SoftDeleteMixin):
    """One launch readiness step of a release."""

    __tablename__ = "checklist_items"

    release_id: Mapped[UUID] = mapped_column(
        ForeignKey("releases.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[ChecklistCategory] = mapped_column(
        enum_column(ChecklistCategory, "checklist_category"),
        nullable=False,
        default=ChecklistCategory.preparation,
    )
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    assignee_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"<ChecklistItem id={self.id} title={self.title!r} done={self.is_completed}>"


class ChangelogType(str, enum.Enum):
    feature = "feature"
    improvement = "improvement"
    bug_fix = "bug_fix"
    breaking_change = "breaking_change"
    security = "security"
    deprecated = "deprecated"


class ChangelogVisibility(str, enum.Enum):
    public = "public"
    private = "private"
    internal = "internal"


class Changelog(Base, UUIDMixin, OrgScopedMixin, ProductScopedMixin, TimestampMixin, SoftDeleteMixin):
    """A user facing change note, optionally attached to a release."""

    __tablename__ = "changelogs"

    release_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("releases.id", ondelete="SET NULL"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[ChangelogType] = mapped_column(
        enum_column(ChangelogType, "changelog_type"),
        nullable=False,
        default=ChangelogType.feature,
    )
    visibility: Mapped[ChangelogVisibility] = mapped_column(
        enum_column(ChangelogVisibility, "changelog_visibility"),
        nullable=False,
        default=ChangelogVisibility.public,
    )
    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)

    def __repr__(self) -> str:
        return f"<Changelog id={self.id} title={self.title!r} type={self.type}>"
