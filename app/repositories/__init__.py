"""Repository layer – all database access goes through here.

Repositories encapsulate SQLAlchemy queries so that the service layer
only contains business logic.
"""

from app.repositories.search_repository import SearchRepository
from app.repositories.task_repository import TaskRepository
from app.repositories.organization_repository import OrganizationRepository
from app.repositories.notification_repository import (
    NotificationRepository,
    NotificationPreferenceRepository,
)

__all__ = [
    "SearchRepository",
    "TaskRepository",
    "OrganizationRepository",
    "NotificationRepository",
    "NotificationPreferenceRepository",
]
