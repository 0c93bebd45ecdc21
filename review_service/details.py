"""Detail ("usage") view of reviews for the dashboard table.

A detail record is a review plus classification fields derived from the
rating and two synthetic display fields, ``costs`` and ``region``. The
synthetic fields are re-rolled on every call; pass a seeded
``random.Random`` as ``rng`` to make them reproducible.
"""

from __future__ import annotations

import random
from collections import Counter
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from dateutil import parser

from review_service.models import isoformat, utcnow

REGIONS = ("US-East", "US-West", "EU-Central", "Asia-Pacific")
COSTS_RANGE = (10.0, 60.0)

DETAIL_FIELDS = (
    "id",
    "owner",
    "customerId",
    "customerName",
    "status",
    "rating",
    "title",
    "comment",
    "costs",
    "region",
    "stability",
    "sentiment",
    "priority",
    "lastEdited",
    "createdAt",
    "updatedAt",
)
DATE_FIELDS = {"createdAt", "updatedAt", "lastEdited"}


class UnknownSortField(ValueError):
    """Raised when sorting by a field detail records do not have."""


def stability_for(rating: int) -> str:
    if rating >= 4:
        return "Stable"
    return "Warning" if rating == 3 else "Critical"


def sentiment_for(rating: int) -> str:
    if rating >= 4:
        return "Positive"
    return "Neutral" if rating == 3 else "Negative"


def priority_for(rating: int) -> str:
    if rating <= 2:
        return "High"
    return "Medium" if rating == 3 else "Low"


def to_detail_record(review: Any, rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """Map a review onto the denormalized detail record."""
    rng = rng or random
    record = review.to_dict()
    record.update(
        {
            "owner": review.customer_name,
            "lastEdited": record["updatedAt"],
            "costs": f"${rng.uniform(*COSTS_RANGE):.2f}",
            "region": rng.choice(REGIONS),
            "stability": stability_for(review.rating),
            "sentiment": sentiment_for(review.rating),
            "priority": priority_for(review.rating),
        }
    )
    return record


def to_detail_records(
    reviews: Iterable[Any], rng: Optional[random.Random] = None
) -> List[Dict[str, Any]]:
    return [to_detail_record(review, rng) for review in reviews]


@dataclass
class DetailFilters:
    """Filters applied to detail records after the store-level query.

    ``status``, ``rating`` and ``customerId`` are pushed down to the store
    (see :meth:`store_filters`); the rest are evaluated here.
    """

    status: Optional[str] = None
    rating: Optional[int] = None
    customerId: Optional[str] = None
    owner: Optional[str] = None
    region: Optional[str] = None
    stability: Optional[str] = None
    sentiment: Optional[str] = None
    priority: Optional[str] = None
    search: Optional[str] = None

    def store_filters(self) -> Dict[str, Any]:
        return {"status": self.status, "rating": self.rating, "customerId": self.customerId}

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def matches(self, record: Dict[str, Any]) -> bool:
        if self.owner and self.owner.lower() not in record["owner"].lower():
            return False
        for name in ("region", "stability", "sentiment", "priority"):
            wanted = getattr(self, name)
            if wanted and record[name] != wanted:
                return False
        if self.search:
            term = self.search.lower()
            haystack = (record["title"], record["comment"], record["owner"], record["customerId"])
            if not any(term in value.lower() for value in haystack):
                return False
        return True

    def apply(self, records: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [record for record in records if self.matches(record)]


def _sort_key(sort_by: str) -> Callable[[Dict[str, Any]], Any]:
    if sort_by == "rating":
        return lambda record: int(record["rating"])
    if sort_by == "costs":
        return lambda record: float(str(record["costs"]).lstrip("$"))
    if sort_by in DATE_FIELDS:
        return lambda record: _as_datetime(record[sort_by])
    return lambda record: str(record[sort_by] or "").lower()


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return parser.isoparse(value)


def sort_records(
    records: Sequence[Dict[str, Any]], sort_by: str = "createdAt", descending: bool = True
) -> List[Dict[str, Any]]:
    """Type-aware stable sort; ties keep their incoming order."""
    if sort_by not in DETAIL_FIELDS:
        raise UnknownSortField(f"sortBy must be one of: {', '.join(DETAIL_FIELDS)}")
    return sorted(records, key=_sort_key(sort_by), reverse=descending)


def paginate(
    records: Sequence[Dict[str, Any]], limit: int, offset: int = 0
) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    total = len(records)
    page = list(records[offset:offset + limit])
    return page, {
        "total": total,
        "limit": limit,
        "offset": offset,
        "hasMore": offset + limit < total,
    }


def _breakdown(records: Iterable[Dict[str, Any]], name: str) -> Dict[str, int]:
    return dict(Counter(record[name] for record in records))


def _average_rating(records: Sequence[Dict[str, Any]]) -> float:
    if not records:
        return 0
    return round(sum(record["rating"] for record in records) / len(records), 2)


def detail_statistics(records: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """Statistics over the whole filtered set, not just the current page."""
    return {
        "total": len(records),
        "statusBreakdown": _breakdown(records, "status"),
        "sentimentBreakdown": _breakdown(records, "sentiment"),
        "stabilityBreakdown": _breakdown(records, "stability"),
        "regionBreakdown": _breakdown(records, "region"),
        "averageRating": _average_rating(records),
    }


def usage_summary(
    records: Sequence[Dict[str, Any]], now: Optional[datetime] = None
) -> Dict[str, Any]:
    return {
        "totalRecords": len(records),
        "statusBreakdown": _breakdown(records, "status"),
        "sentimentBreakdown": _breakdown(records, "sentiment"),
        "stabilityBreakdown": _breakdown(records, "stability"),
        "regionBreakdown": _breakdown(records, "region"),
        "priorityBreakdown": _breakdown(records, "priority"),
        "averageRating": _average_rating(records),
        "generatedAt": isoformat(now or utcnow()),
    }
