from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.cache import CacheService
from app.core.exceptions import OrganizationContextError, PersistenceError
from app.dependencies import build_context
from app.repositories.base import BaseRepository
from app.services.timezone_service import TimezoneResolver, resolve_timezone


class TestRequestContext:
    def test_builds_from_uuid_strings(self):
        org, user = uuid4(), uuid4()
        context = build_context(str(org), str(user))
        assert context.organization_id == org
        assert context.scope_key == f"{org}:{user}"

    @pytest.mark.parametrize(
        "org,user",
        [(None, str(uuid4())), (str(uuid4()), None), ("", ""), ("acme", str(uuid4()))],
    )
    def test_rejects_missing_or_malformed_ids(self, org, user):
        with pytest.raises(OrganizationContextError):
            build_context(org, user)


class TestResolveTimezone:
    def test_known_zone(self):
        assert resolve_timezone("America/Los_Angeles") == ZoneInfo("America/Los_Angeles")

    @pytest.mark.parametrize("name", [None, "", "Mars/Olympus_Mons"])
    def test_falls_back_to_utc(self, name):
        assert resolve_timezone(name) == ZoneInfo("UTC")


class TestTimezoneResolver:
    @pytest.mark.asyncio
    async def test_cache_hit_skips_database(self, ctx, mock_cache, mock_redis):
        mock_redis.get.return_value = "Europe/Berlin"
        org_repo = MagicMock()
        org_repo.get_timezone = AsyncMock()

        tz = await TimezoneResolver(cache=mock_cache).get_timezone(ctx, org_repo)

        assert tz.key == "Europe/Berlin"
        org_repo.get_timezone.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cache_miss_reads_and_stores(self, ctx, mock_cache, mock_redis):
        org_repo = MagicMock()
        org_repo.get_timezone = AsyncMock(return_value="Asia/Tokyo")

        tz = await TimezoneResolver(cache=mock_cache).get_timezone(ctx, org_repo)

        assert tz.key == "Asia/Tokyo"
        mock_redis.setex.assert_awaited_once_with(
            f"org_tz:{ctx.organization_id}", 300, "Asia/Tokyo"
        )

    @pytest.mark.asyncio
    async def test_works_without_redis(self, ctx):
        org_repo = MagicMock()
        org_repo.get_timezone = AsyncMock(return_value=None)

        tz = await TimezoneResolver().get_timezone(ctx, org_repo)

        assert tz.key == "UTC"


class TestCacheService:
    @pytest.mark.asyncio
    async def test_no_redis_is_a_noop(self):
        cache = CacheService()
        assert await cache.get("k") is None
        assert await cache.incr("k") is None
        assert await cache.ping() is False
        await cache.set("k", "v", ttl=10)
        assert not cache.is_available

    @pytest.mark.asyncio
    async def test_redis_errors_degrade(self, mock_cache, mock_redis):
        mock_redis.get.side_effect = ConnectionError("redis down")
        mock_redis.incr.side_effect = ConnectionError("redis down")
        assert await mock_cache.get("k") is None
        assert await mock_cache.incr("k") is None

    @pytest.mark.asyncio
    async def test_get_int(self, mock_cache, mock_redis):
        mock_redis.get.return_value = "12"
        assert await mock_cache.get_int("k") == 12
        mock_redis.get.return_value = "twelve"
        assert await mock_cache.get_int("k") is None


class TestCommitOrRaise:
    @pytest.mark.asyncio
    async def test_success_commits(self):
        db = AsyncMock()
        await BaseRepository(db).commit_or_raise("save")
        db.commit.assert_awaited_once()
        db.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failure_rolls_back(self):
        db = AsyncMock()
        db.commit.side_effect = IntegrityError("INSERT", {}, Exception("dup"))
        with pytest.raises(PersistenceError) as exc_info:
            await BaseRepository(db).commit_or_raise("save widget")
        db.rollback.assert_awaited_once()
        assert exc_info.value.detail == "Could not save widget"
        assert exc_info.value.status_code == 503
