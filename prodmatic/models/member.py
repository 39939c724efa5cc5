"""
OrgMember ORM model and the organization role enumeration.
"""

from __future__ import annotations

import enum
from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from prodmatic.models.base import Base, UUIDMixin, enum_column, utcnow


class OrgRole(str, enum.Enum):
    """Organization member role. Ranking lives in core.permissions."""

    admin = "admin"
    product_manager = "product_manager"
    contributor = "contributor"
    stakeholder = "stakeholder"


class OrgMember(Base, UUIDMixin):
    """Grants one user one role within one organization."""

    __tablename__ = "org_members"
    __table_args__ = (
        UniqueConstraint("org_id", "user_id", name="uq_org_members_org_user"),
    )

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[OrgRole] = mapped_column(enum_column(OrgRole, "org_role"), nullable=False)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<OrgMember org_id={self.org_id} user_id={self.user_id} role={self.role}>"
