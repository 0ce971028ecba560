from app.models.base import Base
from app.models.organization import Organization
from app.models.vendor import Vendor
from app.models.customer import Customer
from app.models.lead import Lead
from app.models.support_case import SupportCase
from app.models.opportunity import Opportunity
from app.models.quote import Quote
from app.models.order import Order
from app.models.task import Task
from app.models.product import Product
from app.models.notification import Notification, NotificationPreference

# Import event listeners to register them
from app.models import listeners  # noqa: F401

__all__ = [
    "Base",
    "Organization",
    "Vendor",
    "Customer",
    "Lead",
    "SupportCase",
    "Opportunity",
    "Quote",
    "Order",
    "Task",
    "Product",
    "Notification",
    "NotificationPreference",
]
