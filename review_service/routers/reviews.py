"""Review CRUD endpoints.

- ``GET /api/reviews`` lists reviews with optional filters and pagination.
- ``GET /api/reviews/{review_id}`` returns a single review.
- ``POST /api/reviews`` creates a review (201).
- ``PUT /api/reviews/{review_id}`` applies a partial update.
- ``DELETE /api/reviews/{review_id}`` removes a review.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from review_service.dependencies import get_store
from review_service.responses import RequestValidationFailed, success
from review_service.store import ReviewStore
from review_service.validation import validate_create, validate_update

logger = logging.getLogger(__name__)

router = APIRouter()

REVIEW_NOT_FOUND = "Review not found"


@router.get("")
async def list_reviews(
    status: Optional[str] = None,
    rating: Optional[int] = None,
    customerId: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=0),
    offset: Optional[int] = Query(None, ge=0),
    sortBy: str = "createdAt",
    sortOrder: Literal["asc", "desc"] = "desc",
    store: ReviewStore = Depends(get_store),
) -> Dict[str, Any]:
    """Return reviews matching the exact-match filters, newest first."""
    result = await store.query(
        {"status": status, "rating": rating, "customerId": customerId},
        sort_by=sortBy,
        descending=sortOrder == "desc",
        limit=limit,
        offset=offset,
    )
    return success(
        {
            "reviews": [review.to_dict() for review in result.items],
            "total": result.total,
            "limit": limit if limit is not None else result.total,
            "offset": offset or 0,
        }
    )


@router.get("/{review_id}")
async def get_review(review_id: str, store: ReviewStore = Depends(get_store)) -> Dict[str, Any]:
    review = await store.get_by_id(review_id)
    if review is None:
        raise HTTPException(status_code=404, detail=REVIEW_NOT_FOUND)
    return success(review.to_dict())


@router.post("", status_code=201)
async def create_review(
    payload: Any = Body(None), store: ReviewStore = Depends(get_store)
) -> Dict[str, Any]:
    """Create a review; ``status`` defaults to ``pending``."""
    validation = validate_create(payload)
    if not validation.is_valid:
        logger.info("Rejected review payload: %s", validation.errors)
        raise RequestValidationFailed(validation.errors)

    review = await store.create(validation.value.model_dump())
    return success(review.to_dict())


@router.put("/{review_id}")
async def update_review(
    review_id: str, payload: Any = Body(None), store: ReviewStore = Depends(get_store)
) -> Dict[str, Any]:
    """Update only the provided fields of an existing review."""
    if await store.get_by_id(review_id) is None:
        raise HTTPException(status_code=404, detail=REVIEW_NOT_FOUND)

    validation = validate_update(payload)
    if not validation.is_valid:
        raise RequestValidationFailed(validation.errors)

    review = await store.update(review_id, validation.value.changes())
    if review is None:
        raise HTTPException(status_code=404, detail=REVIEW_NOT_FOUND)
    return success(review.to_dict())


@router.delete("/{review_id}")
async def delete_review(review_id: str, store: ReviewStore = Depends(get_store)) -> Dict[str, Any]:
    if not await store.delete(review_id):
        raise HTTPException(status_code=404, detail=REVIEW_NOT_FOUND)
    return {"success": True, "message": "Review deleted successfully"}
