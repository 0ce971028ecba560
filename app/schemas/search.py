"""Global-search schemas (normalized results, preview and full modes)."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field

from app.schemas.common import (
    TASK_DONE_STATUS,
    TASK_OPEN_STATUS,
    EntityType,
    SortOption,
)


class SearchResult(BaseModel):
    """One matching row from any entity source, in the common shape.

    ``(type, id)`` identifies a result; the same ``id`` may legitimately
    appear under two different types.
    """

    id: str
    type: EntityType
    name: str
    subtitle: str = ""
    url: str
    status: Optional[str] = None
    stage: Optional[str] = None
    is_done: Optional[bool] = None
    payment_status: Optional[str] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def derived_status(self) -> Optional[str]:
        """``status``, else ``stage``, else completed/open from ``is_done``."""
        if self.status:
            return self.status
        if self.stage:
            return self.stage
        if self.is_done is not None:
            return TASK_DONE_STATUS if self.is_done else TASK_OPEN_STATUS
        return None


class PreviewGroup(BaseModel):
    type: EntityType
    items: List[SearchResult]
    shown: int
    total: int = Field(..., description="True number of matches for this type")


class SearchPreviewResponse(BaseModel):
    """Dropdown-while-typing payload."""

    query: str
    total_count: int
    groups: List[PreviewGroup] = Field(default_factory=list)
    request_token: int
    stale: bool = False


class SearchGroup(BaseModel):
    type: EntityType
    count: int
    items: List[SearchResult]


class SearchResultsResponse(BaseModel):
    """Full results page payload."""

    query: str
    total: int = Field(..., description="Number of results after filters")
    results: List[SearchResult] = Field(default_factory=list)
    groups: List[SearchGroup] = Field(default_factory=list)
    type_counts: Dict[str, int] = Field(
        default_factory=dict, description="Unfiltered matches per type"
    )
    status_options: Dict[str, List[str]] = Field(default_factory=dict)
    type_filter: str = "all"
    status_filters: Dict[str, str] = Field(default_factory=dict)
    sort: SortOption = SortOption.relevance
    request_token: int
    stale: bool = False
