"""Query parameters shared by every list endpoint."""

from dataclasses import dataclass

from fastapi import Query

from dairycart.core.config import get_settings


@dataclass(frozen=True)
class ListParams:
    page: int
    limit: int


def get_list_params(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    limit: int | None = Query(None, ge=1, description="Items per page"),
) -> ListParams:
    """Resolve page/limit, clamping the limit to the configured maximum."""
    settings = get_settings()
    if limit is None:
        limit = settings.default_page_limit
    return ListParams(page=page, limit=min(limit, settings.max_page_limit))
