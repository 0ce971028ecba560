"""Row → :class:`SearchResult` mapping for each searchable entity.

All functions are pure; missing optional columns fall back to empty
strings rather than raising.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Optional
from zoneinfo import ZoneInfo

from app.core.constants import ENTITY_URL_TEMPLATES
from app.schemas.common import EntityType
from app.schemas.search import SearchResult


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _full_name(row: Any) -> str:
    return f"{_text(getattr(row, 'first_name', None))} {_text(getattr(row, 'last_name', None))}".strip()


def _money(amount: Any) -> str:
    if amount is None:
        return "$0"
    if isinstance(amount, Decimal) and amount == amount.to_integral_value():
        amount = amount.quantize(Decimal(1))
    return f"${amount}"


def _url(entity_type: EntityType, row_id: Any) -> str:
    return ENTITY_URL_TEMPLATES[entity_type].format(id=row_id)


def normalize_vendor(row: Any, tz: Optional[ZoneInfo] = None) -> SearchResult:
    return SearchResult(
        id=str(row.id),
        type=EntityType.ACCOUNT,
        name=_text(row.name),
        subtitle=_text(getattr(row, "status", None)),
        url=_url(EntityType.ACCOUNT, row.id),
        status=getattr(row, "status", None),
    )


def normalize_customer(row: Any, tz: Optional[ZoneInfo] = None) -> SearchResult:
    return SearchResult(
        id=str(row.id),
        type=EntityType.CONTACT,
        name=_full_name(row),
        subtitle=getattr(row, "email", None) or getattr(row, "company", None) or "",
        url=_url(EntityType.CONTACT, row.id),
    )


def normalize_lead(row: Any, tz: Optional[ZoneInfo] = None) -> SearchResult:
    return SearchResult(
        id=str(row.id),
        type=EntityType.LEAD,
        name=_full_name(row),
        subtitle=getattr(row, "email", None) or getattr(row, "company", None) or "",
        url=_url(EntityType.LEAD, row.id),
        status=getattr(row, "status", None),
    )


def normalize_case(row: Any, tz: Optional[ZoneInfo] = None) -> SearchResult:
    return SearchResult(
        id=str(row.id),
        type=EntityType.CASE,
        name=_text(row.title),
        subtitle=_text(getattr(row, "type", None)),
        url=_url(EntityType.CASE, row.id),
        status=getattr(row, "status", None),
    )


def normalize_opportunity(row: Any, tz: Optional[ZoneInfo] = None) -> SearchResult:
    return SearchResult(
        id=str(row.id),
        type=EntityType.OPPORTUNITY,
        name=_text(row.name),
        subtitle=_text(getattr(row, "type", None)),
        url=_url(EntityType.OPPORTUNITY, row.id),
        stage=getattr(row, "stage", None),
    )


def normalize_quote(row: Any, tz: Optional[ZoneInfo] = None) -> SearchResult:
    return SearchResult(
        id=str(row.id),
        type=EntityType.QUOTE,
        name=f"Quote #{_text(row.quote_number)}",
        subtitle=_money(getattr(row, "total_amount", None)),
        url=_url(EntityType.QUOTE, row.id),
        status=getattr(row, "status", None),
    )


def normalize_order(row: Any, tz: Optional[ZoneInfo] = None) -> SearchResult:
    return SearchResult(
        id=str(row.id),
        type=EntityType.ORDER,
        name=f"Order #{_text(row.order_number)}",
        subtitle=_money(getattr(row, "total_amount", None)),
        url=_url(EntityType.ORDER, row.id),
        status=getattr(row, "status", None),
        payment_status=getattr(row, "payment_status", None),
    )


def normalize_task(row: Any, tz: Optional[ZoneInfo] = None) -> SearchResult:
    """Tasks show their due date as an org-local calendar date."""
    due: Optional[datetime] = getattr(row, "due_date", None)
    if due is not None:
        if due.tzinfo is None:
            due = due.replace(tzinfo=timezone.utc)
        local = due.astimezone(tz or timezone.utc)
        subtitle = f"Due: {local.date().isoformat()}"
    else:
        subtitle = "No due date"
    return SearchResult(
        id=str(row.id),
        type=EntityType.TASK,
        name=_text(row.title),
        subtitle=subtitle,
        url=_url(EntityType.TASK, row.id),
        is_done=bool(getattr(row, "is_done", False)),
    )


def normalize_product(row: Any, tz: Optional[ZoneInfo] = None) -> SearchResult:
    sku = getattr(row, "sku", None)
    return SearchResult(
        id=str(row.id),
        type=EntityType.PRODUCT,
        name=_text(row.name),
        subtitle=f"SKU: {sku}" if sku else (getattr(row, "category", None) or ""),
        url=_url(EntityType.PRODUCT, row.id),
        status=getattr(row, "status", None),
    )


NORMALIZERS: Dict[EntityType, Callable[[Any, Optional[ZoneInfo]], SearchResult]] = {
    EntityType.ACCOUNT: normalize_vendor,
    EntityType.CONTACT: normalize_customer,
    EntityType.LEAD: normalize_lead,
    EntityType.CASE: normalize_case,
    EntityType.OPPORTUNITY: normalize_opportunity,
    EntityType.QUOTE: normalize_quote,
    EntityType.ORDER: normalize_order,
    EntityType.TASK: normalize_task,
    EntityType.PRODUCT: normalize_product,
}
