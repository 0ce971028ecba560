from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query, Request

from app.core.config import settings
from app.core.constants import FILTER_ALL
from app.core.exceptions import SearchQueryError
from app.core.rate_limit import limiter
from app.schemas.common import EntityType, SortOption
from app.schemas.context import RequestContext
from app.schemas.search import SearchPreviewResponse, SearchResultsResponse
from app.services.search_grouping import build_full_results, group_preview
from app.services.search_service import GlobalSearchService, SearchSequencer
from app.api.deps import (
    get_org_repo,
    get_request_context,
    get_search_sequencer,
    get_search_service,
    get_timezone_resolver,
)

router = APIRouter(prefix="/search", tags=["Search"])


def parse_type_filter(value: Optional[str]) -> str:
    if not value or value == FILTER_ALL:
        return FILTER_ALL
    try:
        return EntityType(value).value
    except ValueError:
        raise SearchQueryError(f"Unknown result type {value!r}")


def parse_status_filters(values: List[str]) -> Dict[str, str]:
    """Parse repeated ``status=<Type>:<value>`` parameters."""
    filters: Dict[str, str] = {}
    for raw in values:
        entity_type, sep, status = raw.partition(":")
        if not sep or not status:
            raise SearchQueryError(f"Status filter {raw!r} must look like Type:value")
        filters[parse_type_filter(entity_type)] = status
    return filters


def parse_session(seq: Optional[int], sid: Optional[str]) -> Optional[str]:
    """Client-numbered requests must say which page session they belong to."""
    if seq is not None and not sid:
        raise SearchQueryError("seq requires a sid identifying the client session")
    return sid


def timezone_loader(resolver, context: RequestContext, org_repo):
    async def load() -> ZoneInfo:
        return await resolver.get_timezone(context, org_repo)

    return load


@router.get("/preview", response_model=SearchPreviewResponse)
@limiter.limit(settings.SEARCH_RATE_LIMIT)
async def search_preview(
    request: Request,
    q: str = Query("", description="Free-text query; fewer than 2 characters returns nothing"),
    seq: Optional[int] = Query(None, ge=0, description="Client-side monotonic request counter"),
    sid: Optional[str] = Query(None, max_length=64, description="Client page session id"),
    context: RequestContext = Depends(get_request_context),
    resolver=Depends(get_timezone_resolver),
    org_repo=Depends(get_org_repo),
    service: GlobalSearchService = Depends(get_search_service),
    sequencer: SearchSequencer = Depends(get_search_sequencer),
) -> SearchPreviewResponse:
    """Grouped matches for the live search dropdown (three per type)."""
    outcome = await service.search_guarded(
        context,
        q,
        sequencer,
        mode="preview",
        tz_loader=timezone_loader(resolver, context, org_repo),
        client_seq=seq,
        session_id=parse_session(seq, sid),
    )
    return SearchPreviewResponse(
        query=q.strip(),
        total_count=len(outcome.results),
        groups=group_preview(outcome.results, per_type=settings.SEARCH_PREVIEW_PER_TYPE),
        request_token=outcome.request_token,
        stale=outcome.stale,
    )


@router.get("", response_model=SearchResultsResponse)
@limiter.limit(settings.SEARCH_RATE_LIMIT)
async def search_results(
    request: Request,
    q: str = Query(""),
    type: Optional[str] = Query(FILTER_ALL, description="'all' or a result type"),
    status: List[str] = Query([], description="Repeated Type:value status filters"),
    sort: SortOption = Query(SortOption.relevance),
    seq: Optional[int] = Query(None, ge=0),
    sid: Optional[str] = Query(None, max_length=64),
    context: RequestContext = Depends(get_request_context),
    resolver=Depends(get_timezone_resolver),
    org_repo=Depends(get_org_repo),
    service: GlobalSearchService = Depends(get_search_service),
    sequencer: SearchSequencer = Depends(get_search_sequencer),
) -> SearchResultsResponse:
    """Full results page: type filter, per-type status filters and sort."""
    type_filter = parse_type_filter(type)
    status_filters = parse_status_filters(status)

    outcome = await service.search_guarded(
        context,
        q,
        sequencer,
        mode="full",
        tz_loader=timezone_loader(resolver, context, org_repo),
        client_seq=seq,
        session_id=parse_session(seq, sid),
    )
    page = build_full_results(outcome.results, type_filter, status_filters, sort)
    return SearchResultsResponse(
        query=q.strip(),
        request_token=outcome.request_token,
        stale=outcome.stale,
        **page,
    )
