"""Dashboard metrics endpoints: daily time series and period summary."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from review_service import config
from review_service.dependencies import get_store
from review_service.metrics import (
    DateOutOfRange,
    UnknownComparisonMode,
    daily_metrics,
    parse_date,
    prune_buckets,
    summary,
)
from review_service.models import utcnow
from review_service.responses import RequestValidationFailed, success
from review_service.store import ReviewStore

router = APIRouter()


def _days_before(end: date, days: int) -> date:
    try:
        return end - timedelta(days=days)
    except OverflowError:
        return date.min


def _resolve_range(
    start_date: Optional[str], end_date: Optional[str], default_days: int
) -> tuple[date, date]:
    errors = []
    end = start = None
    try:
        end = parse_date(end_date) if end_date else utcnow().date()
    except ValueError:
        errors.append("endDate must be an ISO-8601 date")
    try:
        if start_date:
            start = parse_date(start_date)
        elif end is not None:
            start = _days_before(end, default_days)
    except ValueError:
        errors.append("startDate must be an ISO-8601 date")
    if errors:
        raise RequestValidationFailed(errors)
    return start, end


@router.get("/timeseries")
async def timeseries(
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    metrics: Optional[str] = None,
    store: ReviewStore = Depends(get_store),
) -> Dict[str, Any]:
    """Daily buckets for every day in the range, optionally field-pruned."""
    start, end = _resolve_range(startDate, endDate, config.DEFAULT_TIMESERIES_DAYS)
    span = (end - start).days + 1
    if span > config.MAX_TIMESERIES_DAYS:
        raise RequestValidationFailed(
            [f"date range must not exceed {config.MAX_TIMESERIES_DAYS} days (got {span})"]
        )
    buckets = daily_metrics(await store.all(), start, end)

    meta: Dict[str, Any] = {
        "startDate": start.isoformat(),
        "endDate": end.isoformat(),
        "totalDays": len(buckets),
    }
    if metrics:
        requested = [name.strip() for name in metrics.split(",") if name.strip()]
        buckets = prune_buckets(buckets, requested)
        meta["requestedMetrics"] = requested

    return success(buckets, meta)


@router.get("/summary")
async def metrics_summary(
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    comparison: str = "previous_period",
    store: ReviewStore = Depends(get_store),
) -> Dict[str, Any]:
    """KPI summary with an optional previous-period or last-year comparison."""
    start, end = _resolve_range(startDate, endDate, config.DEFAULT_SUMMARY_DAYS)
    if start > end:
        raise RequestValidationFailed(["startDate must not be after endDate"])

    try:
        data = summary(await store.all(), start, end, comparison)
    except (UnknownComparisonMode, DateOutOfRange) as exc:
        raise RequestValidationFailed([str(exc)]) from exc
    return success(data)
