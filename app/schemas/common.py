from enum import Enum
from pydantic import BaseModel

# Derived status labels for rows that only carry an is_done flag
TASK_DONE_STATUS: str = "completed"
TASK_OPEN_STATUS: str = "open"


class EntityType(str, Enum):
    ACCOUNT = "Account"
    CONTACT = "Contact"
    LEAD = "Lead"
    CASE = "Case"
    OPPORTUNITY = "Opportunity"
    QUOTE = "Quote"
    ORDER = "Order"
    TASK = "Task"
    PRODUCT = "Product"


class SortOption(str, Enum):
    relevance = "relevance"
    name_asc = "name-asc"
    name_desc = "name-desc"


class NotificationLinkType(str, Enum):
    case = "case"
    lead = "lead"
    opportunity = "opportunity"
    quote = "quote"
    order = "order"


class SuccessResponse(BaseModel):
    """Generic success response base."""

    success: bool = True
