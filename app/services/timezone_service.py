import logging
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.cache import CacheService
from app.core.config import settings
from app.core.constants import ORG_TIMEZONE_CACHE_PREFIX
from app.repositories.organization_repository import OrganizationRepository
from app.schemas.context import RequestContext

logger = logging.getLogger(__name__)


def resolve_timezone(name: Optional[str]) -> ZoneInfo:
    """Return the ``ZoneInfo`` for *name*, falling back to the default zone.

    An empty or unknown name is a configuration gap, not an error: the
    organization is treated as living in ``DEFAULT_TIMEZONE`` (UTC).
    """
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(
                "Unknown timezone %r; falling back to %s", name, settings.DEFAULT_TIMEZONE
            )
    return ZoneInfo(settings.DEFAULT_TIMEZONE)


class TimezoneResolver:
    """Looks up an organization's configured timezone with Redis caching."""

    def __init__(self, cache: Optional[CacheService] = None) -> None:
        self._cache: CacheService = cache or CacheService()

    async def get_timezone(
        self, context: RequestContext, org_repo: OrganizationRepository
    ) -> ZoneInfo:
        key = f"{ORG_TIMEZONE_CACHE_PREFIX}:{context.organization_id}"
        name = await self._cache.get(key)
        if name is None:
            name = await org_repo.get_timezone(context.organization_id) or ""
            await self._cache.set(key, name, ttl=settings.REDIS_CACHE_TTL)
        return resolve_timezone(name)
