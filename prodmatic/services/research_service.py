"""
Customer research business logic.

Customers belong to a product and are recorded by contributors. Interviews
with them are scheduled and run by product managers. Insights are drawn
from an interview by contributors and carry the interview's product.
Deleting a customer deletes its interviews, and deleting an interview
deletes its insights.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prodmatic.core.dependencies import OrgContext
from prodmatic.core.errors import ValidationError
from prodmatic.models.base import as_utc, utcnow
from prodmatic.models.member import OrgRole
from prodmatic.models.research import Customer, Insight, Interview
from prodmatic.schemas.research import CustomerResponse, InsightResponse, InterviewResponse
from prodmatic.services.entity_service import EntityService


def insights_view(interview_id: UUID) -> str:
    return f"interviews/{interview_id}/insights"


async def delete_interview_tree(
    db: AsyncSession, interview: Interview, deleted_at: datetime
) -> None:
    """Soft delete an interview together with its insights."""
    interview.deleted_at = deleted_at
    result = await db.execute(
        select(Insight).where(Insight.interview_id == interview.id, Insight.deleted_at.is_(None))
    )
    for insight in result.scalars():
        insight.deleted_at = deleted_at


class CustomerService(EntityService[Customer]):
    model = Customer
    entity_type = "CUSTOMER"
    response_schema = CustomerResponse
    label_field = "name"

    create_role = OrgRole.contributor
    update_role = OrgRole.contributor
    delete_role = OrgRole.product_manager

    def ordering(self) -> list[Any]:
        return [Customer.name, Customer.id]

    def describe(self, entity: Customer) -> dict[str, Any]:
        return {"name": entity.name, "email": entity.email, "company": entity.company}

    async def on_delete(self, ctx: OrgContext, entity: Customer) -> None:
        result = await self.db.execute(
            select(Interview).where(
                Interview.customer_id == entity.id, Interview.deleted_at.is_(None)
            )
        )
        for interview in result.scalars():
            await delete_interview_tree(self.db, interview, entity.deleted_at)
            self.touch(insights_view(interview.id))
        self.touch(f"products/{entity.product_id}/interviews")


class InterviewService(EntityService[Interview]):
    """Handles all interview operations. Product managers only."""

    model = Interview
    entity_type = "INTERVIEW"
    response_schema = InterviewResponse

    create_role = OrgRole.product_manager
    update_role = OrgRole.product_manager
    delete_role = OrgRole.product_manager

    def ordering(self) -> list[Any]:
        return [Interview.scheduled_at.desc(), Interview.id]

    def describe(self, entity: Interview) -> dict[str, Any]:
        return {
            "title": entity.title,
            "customer_id": entity.customer_id,
            "scheduled_at": entity.scheduled_at,
        }

    async def insert(self, ctx: OrgContext, values: dict[str, Any]) -> Interview:
        values.setdefault("conductor_id", ctx.user.id)
        return await super().insert(ctx, values)

    async def validate_values(
        self, ctx: OrgContext, values: dict[str, Any], entity: Interview | None
    ) -> None:
        if entity is None and as_utc(values["scheduled_at"]) <= utcnow():
            raise ValidationError(
                "Interview must be scheduled in the future", field="scheduled_at"
            )

        customer_id = values.get("customer_id")
        if customer_id is None:
            return
        customer = await self.db.scalar(
            select(Customer.id).where(
                Customer.id == customer_id,
                Customer.org_id == ctx.org.id,
                Customer.product_id == values["product_id"],
                Customer.deleted_at.is_(None),
            )
        )
        if customer is None:
            raise ValidationError(
                "Customer must belong to the same product",
                code="INVALID_CUSTOMER",
                field="customer_id",
            )

    async def on_delete(self, ctx: OrgContext, entity: Interview) -> None:
        await delete_interview_tree(self.db, entity, entity.deleted_at)
        self.touch(insights_view(entity.id))


class InsightService(EntityService[Insight]):
    """Handles insights recorded against an interview."""

    model = Insight
    entity_type = "INSIGHT"
    response_schema = InsightResponse
    parent_model = Interview
    parent_field = "interview_id"
    parent_label = "interview"

    create_role = OrgRole.contributor
    update_role = OrgRole.contributor
    delete_role = OrgRole.product_manager

    def ordering(self) -> list[Any]:
        return [Insight.created_at.desc(), Insight.id]

    def describe(self, entity: Insight) -> dict[str, Any]:
        return {"title": entity.title, "impact": entity.impact, "interview_id": entity.interview_id}

    async def validate_values(
        self, ctx: OrgContext, values: dict[str, Any], entity: Insight | None
    ) -> None:
        if entity is None:
            interview = await self.db.get(Interview, values["interview_id"])
            values["product_id"] = interview.product_id
