"""
Document ORM model.
"""

from __future__ import annotations

import enum
from uuid import UUID

from sqlalchemy import ForeignKey, Integer, String, Text
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


class DocumentType(str, enum.Enum):
    prd = "prd"
    rfc = "rfc"
    spec = "spec"
    design = "design"
    analysis = "analysis"
    proposal = "proposal"
    guide = "guide"
    other = "other"


class DocumentStatus(str, enum.Enum):
    draft = "draft"
    review = "review"
    approved = "approved"
    rejected = "rejected"
    archived = "archived"


class Document(Base, UUIDMixin, OrgScopedMixin, ProductScopedMixin, TimestampMixin, SoftDeleteMixin):
    """
    A product document going through draft, review and approval.

    The version starts at 1 and grows by one each time the content changes.
    """

    __tablename__ = "documents"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[DocumentType] = mapped_column(
        enum_column(DocumentType, "document_type"), nullable=False, default=DocumentType.prd
    )
    status: Mapped[DocumentStatus] = mapped_column(
        enum_column(DocumentStatus, "document_status"),
        nullable=False,
        default=DocumentStatus.draft,
    )
    template: Mapped[str | None] = mapped_column(String(100), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    review_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    author_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)

    def __repr__(self) -> str:
        return f"<Document id={self.id} title={self.title!r} v{self.version} status={self.status}>"
