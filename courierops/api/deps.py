"""FastAPI dependencies shared by the lifecycle routers."""
from dataclasses import dataclass

from fastapi import Query

from courierops.core.config import get_settings


@dataclass(frozen=True)
class Pagination:
    """Validated page window of a list endpoint."""

    limit: int
    offset: int


def get_pagination(
    limit: int | None = Query(None, ge=1, le=100, description="Page size"),
    offset: int = Query(0, ge=0, description="Number of items to skip"),
) -> Pagination:
    """Resolve page size from the query, falling back to configured defaults.

    Args:
        limit: Requested page size (1..100)
        offset: Number of items to skip

    Returns:
        Pagination window capped at ``max_page_size``
    """
    settings = get_settings()
    if limit is None:
        limit = settings.default_page_size
    return Pagination(limit=min(limit, settings.max_page_size), offset=offset)
