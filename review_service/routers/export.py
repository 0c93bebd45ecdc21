"""Data export endpoints.

``GET /api/export`` negotiates CSV, XML or JSON from the Accept header and
dumps the whole table. The per-format ``/csv`` and ``/json`` endpoints
predate negotiation and take the same filters as ``GET /api/reviews``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import JSONResponse, Response

from review_service.dependencies import get_store
from review_service.exporters import (
    CONTENT_TYPES,
    format_export,
    negotiate_media_type,
    to_csv,
)
from review_service.models import isoformat, utcnow
from review_service.responses import success
from review_service.store import ReviewStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _attachment(filename: str) -> Dict[str, str]:
    return {"Content-Disposition": f"attachment; filename={filename}"}


async def _filtered(
    store: ReviewStore,
    status: Optional[str],
    rating: Optional[int],
    customerId: Optional[str],
    limit: Optional[int],
    offset: Optional[int],
):
    filters = {"status": status, "rating": rating, "customerId": customerId}
    result = await store.query(filters, limit=limit, offset=offset)
    applied = {
        name: value
        for name, value in {**filters, "limit": limit, "offset": offset}.items()
        if value is not None
    }
    return result, applied


@router.get("")
async def export_reviews(
    accept: Optional[str] = Header(None),
    store: ReviewStore = Depends(get_store),
) -> Response:
    """Full database dump in the format negotiated from ``Accept``."""
    media_type = negotiate_media_type(accept)
    payload = format_export(await store.all(), media_type)
    return Response(
        content=payload.body,
        media_type=payload.content_type,
        headers=_attachment(f"reviews_export.{media_type}"),
    )


@router.get("/csv")
async def export_csv(
    status: Optional[str] = None,
    rating: Optional[int] = None,
    customerId: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=0),
    offset: Optional[int] = Query(None, ge=0),
    store: ReviewStore = Depends(get_store),
) -> Response:
    result, _ = await _filtered(store, status, rating, customerId, limit, offset)
    logger.info("Exported %d reviews as legacy csv", len(result.items))
    return Response(
        content=to_csv(result.items),
        media_type=CONTENT_TYPES["csv"],
        headers=_attachment("reviews.csv"),
    )


@router.get("/json")
async def export_json(
    status: Optional[str] = None,
    rating: Optional[int] = None,
    customerId: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=0),
    offset: Optional[int] = Query(None, ge=0),
    store: ReviewStore = Depends(get_store),
) -> JSONResponse:
    result, applied = await _filtered(store, status, rating, customerId, limit, offset)
    logger.info("Exported %d reviews as legacy json", len(result.items))
    return JSONResponse(
        content={
            "exportDate": isoformat(utcnow()),
            "totalRecords": result.total,
            "filters": applied,
            "data": [review.to_dict() for review in result.items],
        },
        headers=_attachment("reviews.json"),
    )


@router.get("/summary")
async def export_summary(store: ReviewStore = Depends(get_store)) -> Dict[str, Any]:
    """Totals, average rating and status/rating breakdowns for all reviews."""
    stats = await store.stats()
    return success(
        {
            "totalReviews": stats["total"],
            "averageRating": stats["averageRating"],
            "statusBreakdown": stats["byStatus"],
            "ratingBreakdown": {str(rating): count for rating, count in stats["byRating"].items()},
            "generatedAt": isoformat(utcnow()),
        }
    )
