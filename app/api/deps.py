"""API-layer dependency functions.

Re-exports all dependency factories from ``app.dependencies`` so that
endpoint modules only need to import from ``app.api.deps``.
"""

from app.dependencies import (
    # Tenant context
    get_request_context,
    get_org_timezone,
    # Repository factories
    get_task_repo,
    get_org_repo,
    get_notification_repo,
    get_preference_repo,
    # Service factories
    get_search_service,
    get_search_sequencer,
    get_calendar_service,
    get_reschedule_service,
    get_task_status_service,
    get_notification_service,
    get_timezone_resolver,
    # Redis
    get_redis_client,
    get_cache_service,
)

__all__ = [
    "get_request_context",
    "get_org_timezone",
    "get_task_repo",
    "get_org_repo",
    "get_notification_repo",
    "get_preference_repo",
    "get_search_service",
    "get_search_sequencer",
    "get_calendar_service",
    "get_reschedule_service",
    "get_task_status_service",
    "get_notification_service",
    "get_timezone_resolver",
    "get_redis_client",
    "get_cache_service",
]
