from typing import Dict, FrozenSet, Tuple

from app.schemas.common import EntityType, NotificationLinkType

# Fixed fan-out order; also the concatenation order of search results
SEARCH_SOURCE_ORDER: Tuple[EntityType, ...] = (
    EntityType.ACCOUNT,
    EntityType.CONTACT,
    EntityType.LEAD,
    EntityType.CASE,
    EntityType.OPPORTUNITY,
    EntityType.QUOTE,
    EntityType.ORDER,
    EntityType.TASK,
    EntityType.PRODUCT,
)

ENTITY_URL_TEMPLATES: Dict[EntityType, str] = {
    EntityType.ACCOUNT: "/admin/vendors/{id}",
    EntityType.CONTACT: "/admin/customers/{id}",
    EntityType.LEAD: "/admin/leads/{id}",
    EntityType.CASE: "/admin/cases/{id}",
    EntityType.OPPORTUNITY: "/admin/opportunities/{id}",
    EntityType.QUOTE: "/admin/quotes/{id}",
    EntityType.ORDER: "/admin/orders/{id}",
    EntityType.TASK: "/admin/tasks/{id}/edit",
    EntityType.PRODUCT: "/admin/products/{id}",
}

NOTIFICATION_LINK_PATHS: Dict[NotificationLinkType, str] = {
    NotificationLinkType.case: "/admin/cases/{id}",
    NotificationLinkType.lead: "/admin/leads/{id}",
    NotificationLinkType.opportunity: "/admin/opportunities/{id}",
    NotificationLinkType.quote: "/admin/quotes/{id}",
    NotificationLinkType.order: "/admin/orders/{id}",
}

# Filter sentinel meaning "no restriction"
FILTER_ALL: str = "all"

# Calendar weeks start on Sunday
WEEKDAY_LABELS: Tuple[str, ...] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

NOTIFICATION_PREFERENCE_FIELDS: FrozenSet[str] = frozenset(
    {
        "email_enabled",
        "push_enabled",
        "do_not_disturb",
        "dnd_start_time",
        "dnd_end_time",
    }
)

ORG_TIMEZONE_CACHE_PREFIX: str = "org_tz"
SEARCH_SEQUENCE_KEY_PREFIX: str = "search:seq"
