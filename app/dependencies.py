import logging
from typing import Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from fastapi import Depends, Header
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import AsyncSessionLocal, get_db
from app.core.exceptions import OrganizationContextError
from app.schemas.context import RequestContext

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tenant context
# ---------------------------------------------------------------------------


def build_context(organization_id: Optional[str], user_id: Optional[str]) -> RequestContext:
    """Parse raw identifiers into a :class:`RequestContext`."""
    if not organization_id or not user_id:
        raise OrganizationContextError(
            "X-Organization-Id and X-User-Id headers are required"
        )
    try:
        return RequestContext(organization_id=UUID(organization_id), user_id=UUID(user_id))
    except ValueError:
        raise OrganizationContextError("Organization and user ids must be UUIDs")


async def get_request_context(
    x_organization_id: Optional[str] = Header(None),
    x_user_id: Optional[str] = Header(None),
) -> RequestContext:
    """Explicit tenant context for the request, taken from headers."""
    return build_context(x_organization_id, x_user_id)


# ---------------------------------------------------------------------------
# Redis client factory
# ---------------------------------------------------------------------------


async def get_redis_client() -> Redis:
    """Get an async Redis client instance using connection pooling."""
    try:
        client = Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
        )
        await client.ping()
        return client
    except Exception:
        logger.warning("Redis unavailable – caching disabled for this request")
        return None  # type: ignore[return-value]


async def get_cache_service(
    redis_client: Redis = Depends(get_redis_client),
):
    """Build a :class:`CacheService` backed by the shared Redis client."""
    from app.core.cache import CacheService

    return CacheService(redis_client=redis_client)


# ---------------------------------------------------------------------------
# Repository factory functions (one per repository, each gets the shared db)
# ---------------------------------------------------------------------------


async def get_task_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.task_repository import TaskRepository

    return TaskRepository(db)


async def get_org_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.organization_repository import OrganizationRepository

    return OrganizationRepository(db)


async def get_notification_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.notification_repository import NotificationRepository

    return NotificationRepository(db)


async def get_preference_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.notification_repository import (
        NotificationPreferenceRepository,
    )

    return NotificationPreferenceRepository(db)


# ---------------------------------------------------------------------------
# Service factory functions
# ---------------------------------------------------------------------------


async def get_timezone_resolver(
    cache=Depends(get_cache_service),
):
    from app.services.timezone_service import TimezoneResolver

    return TimezoneResolver(cache=cache)


async def get_org_timezone(
    context: RequestContext = Depends(get_request_context),
    resolver=Depends(get_timezone_resolver),
    org_repo=Depends(get_org_repo),
) -> ZoneInfo:
    """The organization's timezone (UTC when unset or unknown)."""
    return await resolver.get_timezone(context, org_repo)


async def get_search_service():
    """Build a :class:`GlobalSearchService`; each source opens its own session."""
    from app.services.search_service import GlobalSearchService

    return GlobalSearchService(session_factory=AsyncSessionLocal)


async def get_search_sequencer(
    cache=Depends(get_cache_service),
):
    from app.services.search_service import SearchSequencer

    return SearchSequencer(cache=cache)


async def get_calendar_service():
    from app.services.calendar_service import CalendarService

    return CalendarService()


async def get_reschedule_service():
    from app.services.task_rescheduler import TaskRescheduleService

    return TaskRescheduleService()


async def get_task_status_service():
    from app.services.task_status_service import TaskStatusService

    return TaskStatusService()


async def get_notification_service():
    from app.services.notification_service import NotificationService

    return NotificationService()
