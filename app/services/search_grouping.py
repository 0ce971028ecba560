import logging
from typing import Dict, List, Mapping, Optional

from app.core.constants import FILTER_ALL
from app.schemas.common import EntityType, SortOption
from app.schemas.search import PreviewGroup, SearchGroup, SearchResult

logger = logging.getLogger(__name__)


def group_by_type(results: List[SearchResult]) -> Dict[EntityType, List[SearchResult]]:
    """Bucket results by type, keeping first-seen type order and item order."""
    grouped: Dict[EntityType, List[SearchResult]] = {}
    for result in results:
        grouped.setdefault(result.type, []).append(result)
    return grouped


def group_preview(results: List[SearchResult], per_type: int = 3) -> List[PreviewGroup]:
    """Dropdown groups: at most *per_type* items each, plus the true count."""
    return [
        PreviewGroup(
            type=entity_type,
            items=items[:per_type],
            shown=min(len(items), per_type),
            total=len(items),
        )
        for entity_type, items in group_by_type(results).items()
    ]


def status_options(results: List[SearchResult]) -> Dict[str, List[str]]:
    """Distinct derived statuses per type, in first-seen order.

    Types where no result carries a status, stage or done flag are left
    out entirely so no status filter is offered for them.
    """
    options: Dict[str, List[str]] = {}
    for result in results:
        derived = result.derived_status
        if derived is None:
            continue
        values = options.setdefault(result.type.value, [])
        if derived not in values:
            values.append(derived)
    return options


def apply_filters(
    results: List[SearchResult],
    type_filter: Optional[str] = None,
    status_filters: Optional[Mapping[str, str]] = None,
    sort: SortOption = SortOption.relevance,
) -> List[SearchResult]:
    """Apply the type filter, per-type status filters and sort order.

    A concrete status value for a type keeps only that type's entries
    whose derived status equals it; entries of other types pass through.
    ``relevance`` keeps source order.
    """
    filtered = list(results)
    if type_filter and type_filter != FILTER_ALL:
        filtered = [r for r in filtered if r.type.value == type_filter]

    for entity_type, wanted in (status_filters or {}).items():
        if not wanted or wanted == FILTER_ALL:
            continue
        filtered = [
            r
            for r in filtered
            if r.type.value != entity_type or r.derived_status == wanted
        ]

    if sort == SortOption.name_asc:
        filtered.sort(key=lambda r: r.name.casefold())
    elif sort == SortOption.name_desc:
        filtered.sort(key=lambda r: r.name.casefold(), reverse=True)
    return filtered


def build_full_results(
    results: List[SearchResult],
    type_filter: Optional[str] = None,
    status_filters: Optional[Mapping[str, str]] = None,
    sort: SortOption = SortOption.relevance,
) -> Dict[str, object]:
    """Everything the full results page renders, recomputed from scratch."""
    options = status_options(results)
    # Only types that actually offer statuses can be filtered on
    effective_filters = {
        t: v for t, v in (status_filters or {}).items() if t in options
    }
    dropped = set(status_filters or {}) - set(effective_filters)
    if dropped:
        logger.debug("Ignoring status filters for types without statuses: %s", dropped)

    displayed = apply_filters(results, type_filter, effective_filters, sort)
    groups = [
        SearchGroup(type=entity_type, count=len(items), items=items)
        for entity_type, items in group_by_type(displayed).items()
    ]
    return {
        "total": len(displayed),
        "results": displayed,
        "groups": groups,
        "type_counts": {t.value: len(items) for t, items in group_by_type(results).items()},
        "status_options": options,
        "type_filter": type_filter or FILTER_ALL,
        "status_filters": {
            t: effective_filters.get(t, FILTER_ALL) for t in options
        },
        "sort": sort,
    }
