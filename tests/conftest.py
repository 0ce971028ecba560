from typing import TYPE_CHECKING, AsyncGenerator, Dict
from unittest.mock import AsyncMock
from uuid import UUID

if TYPE_CHECKING:
    from app.core.cache import CacheService

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.schemas.context import RequestContext
from app.services.search_service import SearchSequencer

ORG_ID = UUID("11111111-1111-4111-8111-111111111111")
USER_ID = UUID("22222222-2222-4222-8222-222222222222")


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Yield an ``httpx.AsyncClient`` wired to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Return an ``AsyncMock`` that behaves like ``redis.asyncio.Redis``."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock()
    redis.setex = AsyncMock()
    redis.delete = AsyncMock()
    redis.incr = AsyncMock(return_value=1)
    redis.expire = AsyncMock()
    redis.ping = AsyncMock()
    return redis


@pytest.fixture
def mock_cache(mock_redis) -> "CacheService":
    """Return a ``CacheService`` backed by the mock Redis client."""
    from app.core.cache import CacheService

    return CacheService(redis_client=mock_redis)


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext(organization_id=ORG_ID, user_id=USER_ID)


@pytest.fixture
def ctx_headers() -> Dict[str, str]:
    """Headers carrying the tenant context for API calls."""
    return {"X-Organization-Id": str(ORG_ID), "X-User-Id": str(USER_ID)}


@pytest.fixture(autouse=True)
def reset_search_sequences():
    """The in-process sequence fallback is class-level state."""
    SearchSequencer._local_tokens.clear()
    yield
    SearchSequencer._local_tokens.clear()
