"""Pydantic schemas package – re-exports for convenience."""

# Common enums
from app.schemas.common import (
    EntityType as EntityType,
    SortOption as SortOption,
    NotificationLinkType as NotificationLinkType,
    SuccessResponse as SuccessResponse,
)

# Tenant context
from app.schemas.context import RequestContext as RequestContext

# Search schemas
from app.schemas.search import (
    SearchResult as SearchResult,
    PreviewGroup as PreviewGroup,
    SearchPreviewResponse as SearchPreviewResponse,
    SearchGroup as SearchGroup,
    SearchResultsResponse as SearchResultsResponse,
)

# Task / calendar schemas
from app.schemas.task import (
    TaskOut as TaskOut,
    CalendarDayOut as CalendarDayOut,
    CalendarMonthResponse as CalendarMonthResponse,
    TasksOnDateResponse as TasksOnDateResponse,
    TaskRescheduleRequest as TaskRescheduleRequest,
    TaskRescheduleResponse as TaskRescheduleResponse,
    TaskDoneRequest as TaskDoneRequest,
    TaskDoneResponse as TaskDoneResponse,
)

# Notification schemas
from app.schemas.notification import (
    NotificationOut as NotificationOut,
    NotificationListResponse as NotificationListResponse,
    NotificationCreate as NotificationCreate,
    NotificationDelivery as NotificationDelivery,
    NotificationPreferenceOut as NotificationPreferenceOut,
    NotificationPreferenceUpdate as NotificationPreferenceUpdate,
    MarkReadResponse as MarkReadResponse,
    ClearNotificationsResponse as ClearNotificationsResponse,
)
