import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import CacheService
from app.core.database import get_db
from app.api.deps import get_cache_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache_service),
):
    """Report database and Redis reachability; Redis is optional."""
    try:
        await db.execute(text("SELECT 1"))
        database = "ok"
    except Exception:
        logger.error("Health check: database unreachable", exc_info=True)
        database = "unavailable"
    redis_status = "ok" if await cache.ping() else "unavailable"
    return {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "redis": redis_status,
    }
