from typing import Any, List, Sequence
from uuid import UUID

from sqlalchemy import or_, select

from app.models.customer import Customer
from app.models.lead import Lead
from app.models.opportunity import Opportunity
from app.models.order import Order
from app.models.product import Product
from app.models.quote import Quote
from app.models.support_case import SupportCase
from app.models.task import Task
from app.models.vendor import Vendor
from app.repositories.base import BaseRepository

_LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """Build an ``ILIKE`` pattern that matches *term* literally anywhere."""
    escaped = (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"


class SearchRepository(BaseRepository):
    """Case-insensitive substring lookups, one method per searchable table.

    Every lookup is scoped to a single organization and capped at
    *limit* rows.  Multi-column lookups OR their predicates together.
    """

    async def _ilike_any(
        self,
        model: Any,
        columns: Sequence[Any],
        organization_id: UUID,
        term: str,
        limit: int,
    ) -> List[Any]:
        pattern = contains_pattern(term)
        query = (
            select(model)
            .where(
                model.organization_id == organization_id,
                or_(*(col.ilike(pattern, escape=_LIKE_ESCAPE) for col in columns)),
            )
            .limit(limit)
        )
        result = await self._db.execute(query)
        return list(result.scalars().all())

    async def search_vendors(self, organization_id: UUID, term: str, limit: int) -> List[Vendor]:
        return await self._ilike_any(Vendor, [Vendor.name], organization_id, term, limit)

    async def search_customers(
        self, organization_id: UUID, term: str, limit: int
    ) -> List[Customer]:
        columns = [Customer.first_name, Customer.last_name, Customer.email, Customer.company]
        return await self._ilike_any(Customer, columns, organization_id, term, limit)

    async def search_leads(self, organization_id: UUID, term: str, limit: int) -> List[Lead]:
        columns = [Lead.first_name, Lead.last_name, Lead.email, Lead.company]
        return await self._ilike_any(Lead, columns, organization_id, term, limit)

    async def search_cases(
        self, organization_id: UUID, term: str, limit: int
    ) -> List[SupportCase]:
        return await self._ilike_any(
            SupportCase, [SupportCase.title], organization_id, term, limit
        )

    async def search_opportunities(
        self, organization_id: UUID, term: str, limit: int
    ) -> List[Opportunity]:
        return await self._ilike_any(
            Opportunity, [Opportunity.name], organization_id, term, limit
        )

    async def search_quotes(self, organization_id: UUID, term: str, limit: int) -> List[Quote]:
        columns = [Quote.quote_number, Quote.notes]
        return await self._ilike_any(Quote, columns, organization_id, term, limit)

    async def search_orders(self, organization_id: UUID, term: str, limit: int) -> List[Order]:
        columns = [Order.order_number, Order.notes, Order.po_number]
        return await self._ilike_any(Order, columns, organization_id, term, limit)

    async def search_tasks(self, organization_id: UUID, term: str, limit: int) -> List[Task]:
        columns = [Task.title, Task.description]
        return await self._ilike_any(Task, columns, organization_id, term, limit)

    async def search_products(
        self, organization_id: UUID, term: str, limit: int
    ) -> List[Product]:
        columns = [Product.name, Product.description, Product.sku, Product.category]
        return await self._ilike_any(Product, columns, organization_id, term, limit)
