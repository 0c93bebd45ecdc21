"""Detail-table endpoints for the dashboard."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Depends, Query

from review_service import config
from review_service.dependencies import get_store
from review_service.details import (
    DetailFilters,
    UnknownSortField,
    detail_statistics,
    paginate,
    sort_records,
    to_detail_records,
    usage_summary,
)
from review_service.responses import RequestValidationFailed, success
from review_service.store import ReviewStore

router = APIRouter()


@router.get("/details")
async def usage_details(
    status: Optional[str] = None,
    rating: Optional[int] = None,
    customerId: Optional[str] = None,
    owner: Optional[str] = None,
    region: Optional[str] = None,
    stability: Optional[str] = None,
    sentiment: Optional[str] = None,
    priority: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Query(config.DEFAULT_DETAILS_LIMIT, ge=0),
    offset: int = Query(0, ge=0),
    sortBy: str = "createdAt",
    sortOrder: Literal["asc", "desc"] = "desc",
    store: ReviewStore = Depends(get_store),
) -> Dict[str, Any]:
    """Filtered, sorted and paginated detail records.

    Statistics are computed over the whole filtered set, so they do not
    change with ``limit``/``offset``.
    """
    filters = DetailFilters(
        status=status,
        rating=rating,
        customerId=customerId,
        owner=owner,
        region=region,
        stability=stability,
        sentiment=sentiment,
        priority=priority,
        search=search,
    )

    result = await store.query(filters.store_filters())
    records = filters.apply(to_detail_records(result.items))

    try:
        records = sort_records(records, sortBy, descending=sortOrder == "desc")
    except UnknownSortField as exc:
        raise RequestValidationFailed([str(exc)]) from exc

    page, pagination = paginate(records, limit, offset)
    return success(
        {
            "records": page,
            "pagination": pagination,
            "statistics": detail_statistics(records),
            "filters": {**filters.as_dict(), "sortBy": sortBy, "sortOrder": sortOrder},
        }
    )


@router.get("/summary")
async def usage_overview(store: ReviewStore = Depends(get_store)) -> Dict[str, Any]:
    """Breakdowns over every stored review."""
    records = to_detail_records(await store.all())
    return success(usage_summary(records))
