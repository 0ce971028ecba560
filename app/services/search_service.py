import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Awaitable, Callable, ClassVar, Dict, List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import CacheService
from app.core.config import settings
from app.core.constants import SEARCH_SEQUENCE_KEY_PREFIX, SEARCH_SOURCE_ORDER
from app.repositories.search_repository import SearchRepository
from app.schemas.common import EntityType
from app.schemas.context import RequestContext
from app.schemas.search import SearchResult
from app.services.search_normalizer import NORMALIZERS

logger = logging.getLogger(__name__)

# SearchRepository lookup used for each entity source
_LOOKUPS: Dict[EntityType, str] = {
    EntityType.ACCOUNT: "search_vendors",
    EntityType.CONTACT: "search_customers",
    EntityType.LEAD: "search_leads",
    EntityType.CASE: "search_cases",
    EntityType.OPPORTUNITY: "search_opportunities",
    EntityType.QUOTE: "search_quotes",
    EntityType.ORDER: "search_orders",
    EntityType.TASK: "search_tasks",
    EntityType.PRODUCT: "search_products",
}


# Bound on sequencing scopes remembered in-process while Redis is down
_LOCAL_TOKEN_LIMIT = 10_000


def sequence_scope(
    context: RequestContext, mode: str, session_id: Optional[str] = None
) -> str:
    """Sequencing scope for one user, search mode and client session.

    The dropdown preview and the full results page are separate modes, so
    typing in one never invalidates an in-flight request of the other.
    A client that numbers its own requests also sends a session id, so a
    reloaded page starts a fresh sequence instead of inheriting the old
    high-water mark.
    """
    parts = [context.scope_key, mode]
    if session_id:
        parts.append(session_id)
    return ":".join(parts)


@dataclass
class SearchOutcome:
    """Results of one guarded search plus its sequencing verdict."""

    request_token: int
    results: List[SearchResult] = field(default_factory=list)
    stale: bool = False


class SearchSequencer:
    """Monotonic request tokens per search scope (see :func:`sequence_scope`).

    A response whose token is no longer the latest for its scope is stale:
    a newer search was started while it was in flight, so its results
    must not be shown.  Tokens live in Redis with a TTL so they are shared
    across workers; only when Redis cannot be reached are they kept in a
    bounded in-process table.
    """

    # In-process fallback when Redis is unavailable, oldest scope first
    _local_tokens: ClassVar["OrderedDict[str, int]"] = OrderedDict()

    def __init__(self, cache: Optional[CacheService] = None) -> None:
        self._cache: CacheService = cache or CacheService()

    @staticmethod
    def _key(scope: str) -> str:
        return f"{SEARCH_SEQUENCE_KEY_PREFIX}:{scope}"

    @classmethod
    def _remember(cls, key: str, token: int) -> None:
        cls._local_tokens[key] = token
        cls._local_tokens.move_to_end(key)
        while len(cls._local_tokens) > _LOCAL_TOKEN_LIMIT:
            cls._local_tokens.popitem(last=False)

    async def issue(self, scope: str, client_seq: Optional[int] = None) -> int:
        """Register a new search in *scope* and return its token."""
        key = self._key(scope)
        if client_seq is None:
            if self._cache.is_available:
                token = await self._cache.incr(key, ttl=settings.SEARCH_SEQUENCE_TTL)
                if token is not None:
                    return token
            token = SearchSequencer._local_tokens.get(key, 0) + 1
            self._remember(key, token)
            return token

        latest = await self._latest(key)
        if latest is None or client_seq > latest:
            if self._cache.is_available:
                await self._cache.set(key, str(client_seq), ttl=settings.SEARCH_SEQUENCE_TTL)
            else:
                self._remember(key, client_seq)
        return client_seq

    async def is_latest(self, scope: str, token: int) -> bool:
        latest = await self._latest(self._key(scope))
        return latest is None or token >= latest

    async def _latest(self, key: str) -> Optional[int]:
        value = await self._cache.get_int(key)
        if value is not None:
            return value
        return SearchSequencer._local_tokens.get(key)


class GlobalSearchService:
    """Fans a free-text query out over every searchable entity table.

    Each source runs in its own session so the lookups proceed
    concurrently.  A failing source is logged and contributes nothing;
    it never aborts the others.  Results are concatenated in the fixed
    source order, without cross-source ranking or de-duplication.
    """

    def __init__(
        self,
        session_factory: Callable[..., AsyncSession],
        *,
        source_limit: Optional[int] = None,
        min_query_length: Optional[int] = None,
    ) -> None:
        self._session_factory = session_factory
        self._source_limit = source_limit or settings.SEARCH_SOURCE_LIMIT
        self._min_query_length = (
            min_query_length
            if min_query_length is not None
            else settings.SEARCH_MIN_QUERY_LENGTH
        )

    def is_searchable(self, query: Optional[str]) -> bool:
        """``True`` once the trimmed query reaches the minimum length."""
        return len((query or "").strip()) >= self._min_query_length

    async def search(
        self,
        context: RequestContext,
        query: str,
        tz: Optional[ZoneInfo] = None,
    ) -> List[SearchResult]:
        """Return every source's matches for *query*, in source order.

        Queries shorter than the minimum length (after trimming) return
        an empty list without touching the database.
        """
        if not self.is_searchable(query):
            return []
        term = query.strip()

        batches = await asyncio.gather(
            *(
                self._search_source(entity_type, context, term, tz)
                for entity_type in SEARCH_SOURCE_ORDER
            )
        )
        return [result for batch in batches for result in batch]

    async def search_guarded(
        self,
        context: RequestContext,
        query: str,
        sequencer: SearchSequencer,
        *,
        mode: str = "full",
        tz_loader: Optional[Callable[[], Awaitable[ZoneInfo]]] = None,
        client_seq: Optional[int] = None,
        session_id: Optional[str] = None,
    ) -> SearchOutcome:
        """Run :meth:`search` and discard the results if superseded.

        *tz_loader* is only awaited when the query is long enough to be
        searched, so short queries never look up the organization.
        """
        scope = sequence_scope(context, mode, session_id)
        token = await sequencer.issue(scope, client_seq)
        results: List[SearchResult] = []
        if self.is_searchable(query):
            tz = await tz_loader() if tz_loader is not None else None
            results = await self.search(context, query, tz)
        if not await sequencer.is_latest(scope, token):
            logger.info(
                "Discarding stale search results (scope=%s, token=%d)", scope, token
            )
            return SearchOutcome(request_token=token, stale=True)
        return SearchOutcome(request_token=token, results=results)

    async def _search_source(
        self,
        entity_type: EntityType,
        context: RequestContext,
        term: str,
        tz: Optional[ZoneInfo],
    ) -> List[SearchResult]:
        normalize = NORMALIZERS[entity_type]
        try:
            async with self._session_factory() as session:
                repo = SearchRepository(session)
                lookup = getattr(repo, _LOOKUPS[entity_type])
                rows = await lookup(context.organization_id, term, self._source_limit)
            return [normalize(row, tz) for row in rows]
        except Exception:
            logger.warning(
                "Search lookup failed for %s; treating as no results",
                entity_type.value,
                exc_info=True,
            )
            return []
