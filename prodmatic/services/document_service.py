"""
Document business logic.

Documents move draft -> review -> approved or rejected, and end archived.
The author or a product manager edits and submits; only product managers
approve or reject; the author or an admin deletes. Every content change
bumps the version.
"""

from __future__ import annotations

from typing import Any, Literal
from uuid import UUID

from prodmatic.core.dependencies import OrgContext
from prodmatic.core.errors import ValidationError
from prodmatic.models.document import Document, DocumentStatus
from prodmatic.models.member import OrgRole
from prodmatic.schemas.document import DocumentResponse, DocumentUpdateRequest
from prodmatic.services.entity_service import EntityService

DOCUMENT_TRANSITIONS: dict[DocumentStatus, set[DocumentStatus]] = {
    DocumentStatus.draft: {DocumentStatus.review, DocumentStatus.archived},
    DocumentStatus.review: {DocumentStatus.approved, DocumentStatus.rejected},
    DocumentStatus.approved: {DocumentStatus.archived},
    DocumentStatus.rejected: {DocumentStatus.review, DocumentStatus.archived},
    DocumentStatus.archived: set(),
}


class DocumentService(EntityService[Document]):
    """Handles all document operations."""

    model = Document
    entity_type = "DOCUMENT"
    response_schema = DocumentResponse
    owner_field = "author_id"

    create_role = OrgRole.contributor
    update_role = OrgRole.product_manager
    transition_role = OrgRole.product_manager
    delete_role = OrgRole.admin

    def ordering(self) -> list[Any]:
        return [Document.updated_at.desc(), Document.id]

    def describe(self, entity: Document) -> dict[str, Any]:
        return {"title": entity.title, "type": entity.type, "version": entity.version}

    async def insert(self, ctx: OrgContext, values: dict[str, Any]) -> Document:
        values.setdefault("author_id", ctx.user.id)
        return await super().insert(ctx, values)

    async def validate_transition(
        self, ctx: OrgContext, entity: Document, old: DocumentStatus, new: DocumentStatus
    ) -> None:
        if new not in DOCUMENT_TRANSITIONS[old]:
            raise ValidationError(
                f"Cannot move a {old.value} document to {new.value}",
                code="INVALID_STATUS_TRANSITION",
            )

    async def update(
        self, ctx: OrgContext, document_id: UUID, data: DocumentUpdateRequest
    ) -> DocumentResponse:
        changes = data.model_dump(exclude_unset=True)

        async def apply(document: Document) -> dict[str, Any]:
            if document.status == DocumentStatus.archived:
                raise ValidationError(
                    "Archived documents cannot be edited", code="DOCUMENT_ARCHIVED"
                )
            diff = self.apply_changes(document, changes)
            if "content" in diff:
                document.version += 1
            return {
                "changes": diff,
                "version": document.version,
                "version_incremented": "content" in diff,
            }

        return await self.mutate(
            ctx, document_id, self.update_role, "UPDATED", apply, allow_owner=True
        )

    async def submit_for_review(self, ctx: OrgContext, document_id: UUID) -> DocumentResponse:
        return await self.transition(
            ctx,
            document_id,
            DocumentStatus.review,
            action="SUBMITTED_FOR_REVIEW",
            allow_owner=True,
        )

    async def review(
        self,
        ctx: OrgContext,
        document_id: UUID,
        decision: Literal["approve", "reject"],
        comment: str | None = None,
    ) -> DocumentResponse:
        """Approve or reject a document that is in review. Product managers only."""
        new = DocumentStatus.approved if decision == "approve" else DocumentStatus.rejected

        async def change(document: Document) -> dict[str, Any]:
            old = document.status
            await self.validate_transition(ctx, document, old, new)
            document.status = new
            document.review_comment = comment
            return {"field": "status", "from": old, "to": new, "comment": comment}

        action = "APPROVED" if decision == "approve" else "REJECTED"
        return await self.mutate(ctx, document_id, OrgRole.product_manager, action, change)

    async def archive(self, ctx: OrgContext, document_id: UUID) -> DocumentResponse:
        return await self.transition(
            ctx, document_id, DocumentStatus.archived, action="ARCHIVED", allow_owner=True
        )

    async def duplicate(self, ctx: OrgContext, document_id: UUID) -> DocumentResponse:
        """Copy a document into a new draft owned by the caller."""
        original = await self.load_authorized(ctx, document_id, OrgRole.contributor)
        copy = await self.insert(
            ctx,
            {
                "product_id": original.product_id,
                "title": f"{original.title[:193]} (Copy)",
                "content": original.content,
                "type": original.type,
                "template": original.template,
            },
        )
        return await self.finish(
            ctx,
            copy,
            "DUPLICATED",
            {"title": copy.title, "original_id": original.id, "original_title": original.title},
        )
