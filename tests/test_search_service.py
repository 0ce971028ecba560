from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from app.core.constants import SEARCH_SOURCE_ORDER
from app.repositories.search_repository import contains_pattern
from app.schemas.common import EntityType
from app.services.search_service import (
    GlobalSearchService,
    SearchSequencer,
    _LOOKUPS,
    sequence_scope,
)


def _session_factory():
    """Stand-in for ``async_sessionmaker``: yields a dummy session."""

    @asynccontextmanager
    async def factory():
        yield MagicMock()

    return factory


def _repo_with(**lookups) -> MagicMock:
    """Mock SearchRepository; unspecified lookups return no rows."""
    repo = MagicMock()
    for name in _LOOKUPS.values():
        setattr(repo, name, AsyncMock(return_value=[]))
    for name, mock in lookups.items():
        setattr(repo, name, mock)
    return repo


VENDOR = SimpleNamespace(id=uuid4(), name="Acme Corp", status="active")
PRODUCT = SimpleNamespace(
    id=uuid4(), name="Acme Widget", sku="WID-1", category=None, status="active"
)
LEAD = SimpleNamespace(
    id=uuid4(), first_name="Ann", last_name="Acme", email=None, company=None, status="new"
)


class TestGlobalSearch:
    @pytest.mark.asyncio
    async def test_short_query_issues_no_lookups(self, ctx):
        repo = _repo_with()
        service = GlobalSearchService(session_factory=_session_factory())
        with patch("app.services.search_service.SearchRepository", return_value=repo):
            assert await service.search(ctx, " a ") == []
            assert await service.search(ctx, "") == []
        for name in _LOOKUPS.values():
            getattr(repo, name).assert_not_awaited()

    @pytest.mark.asyncio
    async def test_query_is_trimmed_and_scoped(self, ctx):
        repo = _repo_with()
        service = GlobalSearchService(session_factory=_session_factory(), source_limit=5)
        with patch("app.services.search_service.SearchRepository", return_value=repo):
            await service.search(ctx, "  acme  ")
        repo.search_vendors.assert_awaited_once_with(ctx.organization_id, "acme", 5)
        repo.search_tasks.assert_awaited_once_with(ctx.organization_id, "acme", 5)

    @pytest.mark.asyncio
    async def test_results_concatenate_in_source_order(self, ctx):
        repo = _repo_with(
            search_products=AsyncMock(return_value=[PRODUCT]),
            search_vendors=AsyncMock(return_value=[VENDOR]),
            search_leads=AsyncMock(return_value=[LEAD]),
        )
        service = GlobalSearchService(session_factory=_session_factory())
        with patch("app.services.search_service.SearchRepository", return_value=repo):
            results = await service.search(ctx, "acme")
        assert [r.type for r in results] == [
            EntityType.ACCOUNT,
            EntityType.LEAD,
            EntityType.PRODUCT,
        ]

    @pytest.mark.asyncio
    async def test_failing_source_does_not_abort_others(self, ctx):
        repo = _repo_with(
            search_vendors=AsyncMock(return_value=[VENDOR]),
            search_cases=AsyncMock(side_effect=RuntimeError("relation does not exist")),
            search_products=AsyncMock(return_value=[PRODUCT]),
        )
        service = GlobalSearchService(session_factory=_session_factory())
        with patch("app.services.search_service.SearchRepository", return_value=repo):
            results = await service.search(ctx, "acme")
        assert [r.type for r in results] == [EntityType.ACCOUNT, EntityType.PRODUCT]

    @pytest.mark.asyncio
    async def test_every_source_is_queried(self, ctx):
        repo = _repo_with()
        service = GlobalSearchService(session_factory=_session_factory())
        with patch("app.services.search_service.SearchRepository", return_value=repo):
            await service.search(ctx, "acme")
        for entity_type in SEARCH_SOURCE_ORDER:
            getattr(repo, _LOOKUPS[entity_type]).assert_awaited_once()


class TestSearchSequencer:
    @pytest.mark.asyncio
    async def test_local_tokens_increase_without_redis(self):
        sequencer = SearchSequencer()
        first = await sequencer.issue("org:user")
        second = await sequencer.issue("org:user")
        assert second > first
        assert not await sequencer.is_latest("org:user", first)
        assert await sequencer.is_latest("org:user", second)

    @pytest.mark.asyncio
    async def test_scopes_are_independent(self):
        sequencer = SearchSequencer()
        await sequencer.issue("org:a")
        token_b = await sequencer.issue("org:b")
        await sequencer.issue("org:a")
        assert await sequencer.is_latest("org:b", token_b)

    @pytest.mark.asyncio
    async def test_client_sequence_numbers(self):
        sequencer = SearchSequencer()
        assert await sequencer.issue("org:user", client_seq=5) == 5
        # An older request arriving late does not lower the high-water mark
        assert await sequencer.issue("org:user", client_seq=3) == 3
        assert not await sequencer.is_latest("org:user", 3)
        assert await sequencer.is_latest("org:user", 5)

    @pytest.mark.asyncio
    async def test_uses_redis_counter_when_available(self, mock_cache, mock_redis):
        mock_redis.incr.return_value = 7
        sequencer = SearchSequencer(cache=mock_cache)
        assert await sequencer.issue("org:user") == 7
        mock_redis.incr.assert_awaited_once_with("search:seq:org:user")

    @pytest.mark.asyncio
    async def test_client_sequence_goes_to_redis_only(self, mock_cache, mock_redis):
        sequencer = SearchSequencer(cache=mock_cache)
        assert await sequencer.issue("org:user", client_seq=4) == 4
        mock_redis.setex.assert_awaited_once()
        assert SearchSequencer._local_tokens == {}

    @pytest.mark.asyncio
    async def test_redis_counter_is_not_mirrored_locally(self, mock_cache, mock_redis):
        mock_redis.incr.return_value = 3
        await SearchSequencer(cache=mock_cache).issue("org:user")
        assert SearchSequencer._local_tokens == {}

    @pytest.mark.asyncio
    async def test_redis_failure_falls_back_to_local_counter(self, mock_cache, mock_redis):
        mock_redis.incr.side_effect = ConnectionError("down")
        sequencer = SearchSequencer(cache=mock_cache)
        assert await sequencer.issue("org:user") == 1
        assert SearchSequencer._local_tokens == {"search:seq:org:user": 1}

    @pytest.mark.asyncio
    async def test_local_table_evicts_oldest_scopes(self):
        sequencer = SearchSequencer()
        with patch("app.services.search_service._LOCAL_TOKEN_LIMIT", 3):
            for name in ("a", "b", "c", "d"):
                await sequencer.issue(f"org:{name}")
        assert list(SearchSequencer._local_tokens) == [
            "search:seq:org:b",
            "search:seq:org:c",
            "search:seq:org:d",
        ]


class TestSequenceScope:
    def test_scope_includes_mode(self, ctx):
        assert sequence_scope(ctx, "preview") == f"{ctx.scope_key}:preview"

    def test_scope_includes_session(self, ctx):
        assert sequence_scope(ctx, "full", "tab-1") == f"{ctx.scope_key}:full:tab-1"

    @pytest.mark.asyncio
    async def test_new_session_starts_fresh_sequence(self, ctx):
        sequencer = SearchSequencer()
        old_tab = sequence_scope(ctx, "full", "tab-old")
        for seq in range(1, 51):
            await sequencer.issue(old_tab, client_seq=seq)

        # Reloaded page restarts its counter under a new session id
        new_tab = sequence_scope(ctx, "full", "tab-new")
        token = await sequencer.issue(new_tab, client_seq=1)
        assert await sequencer.is_latest(new_tab, token)

    @pytest.mark.asyncio
    async def test_preview_does_not_supersede_full_results(self, ctx):
        sequencer = SearchSequencer()
        full_scope = sequence_scope(ctx, "full")
        full_token = await sequencer.issue(full_scope)
        await sequencer.issue(sequence_scope(ctx, "preview"))
        assert await sequencer.is_latest(full_scope, full_token)


class TestGuardedSearch:
    @pytest.mark.asyncio
    async def test_latest_response_is_kept(self, ctx):
        repo = _repo_with(search_vendors=AsyncMock(return_value=[VENDOR]))
        service = GlobalSearchService(session_factory=_session_factory())
        with patch("app.services.search_service.SearchRepository", return_value=repo):
            outcome = await service.search_guarded(ctx, "acme", SearchSequencer())
        assert not outcome.stale
        assert len(outcome.results) == 1

    @pytest.mark.asyncio
    async def test_superseded_response_is_discarded(self, ctx):
        sequencer = SearchSequencer()
        service = GlobalSearchService(session_factory=_session_factory())

        async def slow_search(context, query, tz=None):
            # A newer keystroke starts another search while this one runs
            await sequencer.issue(sequence_scope(context, "full"))
            return [MagicMock()]

        service.search = slow_search
        outcome = await service.search_guarded(ctx, "ac", sequencer)
        assert outcome.stale
        assert outcome.results == []

    @pytest.mark.asyncio
    async def test_preview_keystroke_keeps_full_search_current(self, ctx):
        sequencer = SearchSequencer()
        service = GlobalSearchService(session_factory=_session_factory())

        async def search_while_typing(context, query, tz=None):
            await sequencer.issue(sequence_scope(context, "preview"))
            return [MagicMock()]

        service.search = search_while_typing
        outcome = await service.search_guarded(ctx, "acme", sequencer, mode="full")
        assert not outcome.stale
        assert len(outcome.results) == 1

    @pytest.mark.asyncio
    async def test_short_query_skips_timezone_lookup(self, ctx):
        tz_loader = AsyncMock(return_value=ZoneInfo("UTC"))
        service = GlobalSearchService(session_factory=_session_factory())
        outcome = await service.search_guarded(
            ctx, " a ", SearchSequencer(), tz_loader=tz_loader
        )
        assert outcome.results == []
        tz_loader.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_timezone_is_loaded_for_real_queries(self, ctx):
        tz = ZoneInfo("Asia/Karachi")
        tz_loader = AsyncMock(return_value=tz)
        service = GlobalSearchService(session_factory=_session_factory())
        service.search = AsyncMock(return_value=[])
        await service.search_guarded(ctx, "acme", SearchSequencer(), tz_loader=tz_loader)
        tz_loader.assert_awaited_once()
        service.search.assert_awaited_once_with(ctx, "acme", tz)

    def test_is_searchable_trims(self):
        service = GlobalSearchService(session_factory=_session_factory(), min_query_length=2)
        assert service.is_searchable(" ab ")
        assert not service.is_searchable(" a ")
        assert not service.is_searchable(None)


class TestContainsPattern:
    @pytest.mark.parametrize(
        "term,expected",
        [
            ("acme", "%acme%"),
            ("50%", "%50\\%%"),
            ("a_b", "%a\\_b%"),
            ("c:\\x", "%c:\\\\x%"),
        ],
    )
    def test_wildcards_are_escaped(self, term, expected):
        assert contains_pattern(term) == expected
