"""Dashboard metrics derived from stored reviews.

Everything here is a pure function over an in-memory sequence of reviews
(anything with ``rating``, ``status`` and ``created_at`` attributes), so the
same code serves the HTTP layer and the tests.

Reviews are bucketed by the calendar date of ``created_at``. Timestamps are
stored in UTC, so the calendar day is the UTC day.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from dateutil import parser
from dateutil.relativedelta import relativedelta

from review_service.models import ReviewStatus, isoformat, utcnow

logger = logging.getLogger(__name__)

COMPARISON_MODES = ("previous_period", "last_year", "none")

BUCKET_FIELDS = (
    "reviewsSubmitted",
    "reviewsApproved",
    "reviewsPending",
    "reviewsRejected",
    "averageRating",
    "fiveStarCount",
    "interactions",
    "escalations",
)

END_OF_DAY = time(23, 59, 59, 999000)
ONE_MS = timedelta(milliseconds=1)

DateLike = Union[date, datetime, str]


class UnknownComparisonMode(ValueError):
    """Raised for a comparison mode outside :data:`COMPARISON_MODES`."""


class DateOutOfRange(ValueError):
    """Raised when a comparison window falls outside the supported calendar."""


def parse_date(value: DateLike) -> date:
    """Coerce ``YYYY-MM-DD``, an ISO-8601 timestamp or a date into a date.

    Aware timestamps are converted to UTC before the date is taken.
    Raises ``ValueError`` for strings that are not ISO-8601.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return value
    else:
        parsed = parser.isoparse(str(value).strip())

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def _round2(value: float) -> float:
    return round(value, 2)


def _average(ratings: Sequence[int]) -> float:
    return sum(ratings) / len(ratings) if ratings else 0


def _bucket(day: date, reviews: Sequence[Any]) -> Dict[str, Any]:
    ratings = [review.rating for review in reviews]
    statuses = Counter(review.status for review in reviews)
    return {
        "date": day.isoformat(),
        "reviewsSubmitted": len(reviews),
        "reviewsApproved": statuses[ReviewStatus.APPROVED.value],
        "reviewsPending": statuses[ReviewStatus.PENDING.value],
        "reviewsRejected": statuses[ReviewStatus.REJECTED.value],
        "averageRating": _round2(_average(ratings)),
        "fiveStarCount": sum(1 for rating in ratings if rating == 5),
        "interactions": len(reviews),
        "escalations": sum(1 for rating in ratings if rating <= 2),
    }


def daily_metrics(
    reviews: Iterable[Any], start_date: DateLike, end_date: DateLike
) -> List[Dict[str, Any]]:
    """Return one bucket per calendar day in ``[start_date, end_date]``.

    Days without reviews still get a bucket with zero counts and an
    average rating of 0. An inverted range yields an empty list.
    """
    start, end = parse_date(start_date), parse_date(end_date)

    by_day: Dict[date, List[Any]] = defaultdict(list)
    for review in reviews:
        day = review.created_at.date()
        if start <= day <= end:
            by_day[day].append(review)

    buckets = []
    for offset in range((end - start).days + 1):
        day = start + timedelta(days=offset)
        buckets.append(_bucket(day, by_day.get(day, [])))
    return buckets


def prune_buckets(
    buckets: Iterable[Dict[str, Any]], fields: Sequence[str]
) -> List[Dict[str, Any]]:
    """Keep ``date`` plus the requested fields that exist in each bucket."""
    wanted = [name for name in fields if name and name != "date"]
    return [
        {"date": bucket["date"], **{name: bucket[name] for name in wanted if name in bucket}}
        for bucket in buckets
    ]


def period_window(start_date: DateLike, end_date: DateLike) -> Tuple[datetime, datetime]:
    """Inclusive window ``[start 00:00:00.000, end 23:59:59.999]``."""
    start = datetime.combine(parse_date(start_date), time.min)
    end = datetime.combine(parse_date(end_date), END_OF_DAY)
    return start, end


def comparison_window(
    start: datetime, end: datetime, mode: str
) -> Optional[Tuple[datetime, datetime]]:
    """Window to compare ``[start, end]`` against, or ``None`` for ``none``."""
    if mode == "none":
        return None
    if mode not in COMPARISON_MODES:
        raise UnknownComparisonMode(
            f"comparison must be one of: {', '.join(COMPARISON_MODES)}"
        )

    try:
        if mode == "previous_period":
            previous_end = start - ONE_MS
            return previous_end - (end - start), previous_end
        return start - relativedelta(years=1), end - relativedelta(years=1)
    except (OverflowError, ValueError) as exc:
        raise DateOutOfRange(
            f"{mode} comparison for {start.date()}..{end.date()} is out of range"
        ) from exc


def in_window(reviews: Iterable[Any], start: datetime, end: datetime) -> List[Any]:
    return [review for review in reviews if start <= review.created_at <= end]


def period_stats(reviews: Sequence[Any]) -> Dict[str, Any]:
    """Tracked comparison metrics; ``averageRating`` is left unrounded."""
    ratings = [review.rating for review in reviews]
    statuses = Counter(review.status for review in reviews)
    return {
        "totalReviews": len(reviews),
        "averageRating": _average(ratings),
        "approvedReviews": statuses[ReviewStatus.APPROVED.value],
        "pendingReviews": statuses[ReviewStatus.PENDING.value],
        "fiveStarReviews": sum(1 for rating in ratings if rating == 5),
        "lowRatingReviews": sum(1 for rating in ratings if rating <= 2),
    }


def percentage_change(current: float, previous: float) -> float:
    """Percent change from ``previous`` to ``current``.

    A zero baseline reports 100 when anything appeared and 0 otherwise.
    """
    if previous == 0:
        return 100 if current > 0 else 0
    return _round2((current - previous) / previous * 100)


def compare_periods(current: Sequence[Any], previous: Sequence[Any]) -> Dict[str, Any]:
    current_stats = period_stats(current)
    previous_stats = period_stats(previous)
    changes = {
        name: percentage_change(current_stats[name], previous_stats[name])
        for name in current_stats
    }
    for stats in (current_stats, previous_stats):
        stats["averageRating"] = _round2(stats["averageRating"])
    return {"current": current_stats, "previous": previous_stats, "changes": changes}


def sentiment_counts(reviews: Sequence[Any]) -> Dict[str, int]:
    ratings = [review.rating for review in reviews]
    return {
        "positive": sum(1 for rating in ratings if rating >= 4),
        "neutral": sum(1 for rating in ratings if rating == 3),
        "negative": sum(1 for rating in ratings if rating <= 2),
    }


def summary(
    reviews: Sequence[Any],
    start_date: DateLike,
    end_date: DateLike,
    comparison_mode: str = "previous_period",
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """KPI summary for a period, optionally compared with another period."""
    if comparison_mode not in COMPARISON_MODES:
        raise UnknownComparisonMode(
            f"comparison must be one of: {', '.join(COMPARISON_MODES)}"
        )

    start, end = period_window(start_date, end_date)
    current = in_window(reviews, start, end)

    comparison = None
    window = comparison_window(start, end, comparison_mode)
    if window is not None:
        previous = in_window(reviews, *window)
        comparison = compare_periods(current, previous)
        comparison["mode"] = comparison_mode
        comparison["period"] = {
            "startDate": isoformat(window[0]),
            "endDate": isoformat(window[1]),
        }
        logger.debug(
            "Summary %s..%s: %d reviews vs %d (%s)",
            start, end, len(current), len(previous), comparison_mode,
        )

    total = len(current)
    satisfied = sum(1 for review in current if review.rating >= 4)

    return {
        "period": {"startDate": isoformat(start), "endDate": isoformat(end)},
        "metrics": {
            "totalReviews": total,
            "averageRating": _round2(_average([review.rating for review in current])),
            "satisfactionScore": _round2(satisfied / total * 100) if total else 0,
            "statusBreakdown": dict(Counter(review.status for review in current)),
            "ratingBreakdown": {
                str(rating): count
                for rating, count in sorted(Counter(r.rating for r in current).items())
            },
            "customerSentiment": sentiment_counts(current),
        },
        "comparison": comparison,
        "generatedAt": isoformat(now or utcnow()),
    }
