"""Review persistence on top of an injected ``AsyncSession``."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from review_service.models import Review, ReviewStatus, new_review_id, utcnow

logger = logging.getLogger(__name__)

# Query-string filter name -> column; anything else is ignored.
FILTER_COLUMNS = {
    "status": Review.status,
    "rating": Review.rating,
    "customerId": Review.customer_id,
}

SORT_COLUMNS = {
    "createdAt": Review.created_at,
    "updatedAt": Review.updated_at,
    "rating": Review.rating,
    "customerName": Review.customer_name,
    "status": Review.status,
    "title": Review.title,
}

MUTABLE_FIELDS = ("customer_id", "customer_name", "rating", "title", "comment", "status")


class StorageError(RuntimeError):
    """Raised when the underlying database operation fails."""


@dataclass
class QueryResult:
    items: List[Review] = field(default_factory=list)
    total: int = 0


class ReviewStore:
    """CRUD and filtered queries over the ``reviews`` table.

    The store never commits on read paths; ``create``, ``update``,
    ``delete`` and ``add_all`` commit their own unit of work.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _commit(self, action: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Failed to %s: %s", action, exc, exc_info=True)
            raise StorageError(f"Failed to {action}") from exc

    async def create(self, data: Mapping[str, Any]) -> Review:
        """Insert a new review built from validated ``data``."""
        now = utcnow()
        review = Review(
            id=new_review_id(),
            customer_id=data["customer_id"],
            customer_name=data["customer_name"],
            rating=data["rating"],
            title=data["title"],
            comment=data["comment"],
            status=data.get("status") or ReviewStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        self.session.add(review)
        await self._commit("save review")
        logger.info("Created review %s (rating=%s)", review.id, review.rating)
        return review

    async def get_by_id(self, review_id: str) -> Optional[Review]:
        try:
            return await self.session.get(Review, review_id)
        except SQLAlchemyError as exc:
            logger.error("Failed to load review %s: %s", review_id, exc, exc_info=True)
            raise StorageError("Failed to retrieve review") from exc

    async def update(self, review_id: str, changes: Mapping[str, Any]) -> Optional[Review]:
        """Apply a partial update; ``updated_at`` always moves forward."""
        review = await self.get_by_id(review_id)
        if review is None:
            return None

        for name in MUTABLE_FIELDS:
            if name in changes:
                setattr(review, name, changes[name])

        now = utcnow()
        if review.updated_at is not None and now <= review.updated_at:
            now = review.updated_at + timedelta(milliseconds=1)
        review.updated_at = now

        await self._commit("update review")
        logger.info("Updated review %s (fields=%s)", review_id, sorted(changes))
        return review

    async def delete(self, review_id: str) -> bool:
        try:
            result = await self.session.execute(delete(Review).where(Review.id == review_id))
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Failed to delete review %s: %s", review_id, exc, exc_info=True)
            raise StorageError("Failed to delete review") from exc

        await self._commit("delete review")
        deleted = result.rowcount > 0
        if deleted:
            logger.info("Deleted review %s", review_id)
        return deleted

    async def query(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        sort_by: str = "createdAt",
        descending: bool = True,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> QueryResult:
        """Return a filtered, sorted page plus the pre-pagination total."""
        conditions = [
            FILTER_COLUMNS[name] == value
            for name, value in (filters or {}).items()
            if name in FILTER_COLUMNS and value is not None and value != ""
        ]

        column = SORT_COLUMNS.get(sort_by, Review.created_at)
        # id breaks ties so pages stay disjoint when timestamps collide
        if descending:
            order = (column.desc(), Review.id.desc())
        else:
            order = (column.asc(), Review.id.asc())

        stmt = select(Review).where(*conditions).order_by(*order)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        count_stmt = select(func.count()).select_from(Review).where(*conditions)

        try:
            total = (await self.session.execute(count_stmt)).scalar_one()
            items = list((await self.session.execute(stmt)).scalars().all())
        except SQLAlchemyError as exc:
            logger.error("Failed to query reviews: %s", exc, exc_info=True)
            raise StorageError("Failed to retrieve filtered reviews") from exc

        logger.debug("Review query %s returned %d of %d", filters, len(items), total)
        return QueryResult(items=items, total=total)

    async def all(self) -> List[Review]:
        return (await self.query()).items

    async def add_all(self, reviews: Iterable[Review]) -> int:
        """Bulk insert pre-built reviews (used for seeding)."""
        batch = list(reviews)
        self.session.add_all(batch)
        await self._commit("insert reviews")
        logger.info("Inserted %d reviews", len(batch))
        return len(batch)

    async def clear(self) -> int:
        result = await self.session.execute(delete(Review))
        await self._commit("clear reviews")
        logger.info("Cleared %d reviews", result.rowcount)
        return result.rowcount

    async def stats(self) -> Dict[str, Any]:
        """Totals, average rating and counts by rating and status."""
        try:
            total = (await self.session.execute(select(func.count(Review.id)))).scalar_one()
            average = (await self.session.execute(select(func.avg(Review.rating)))).scalar()
            by_rating = await self.session.execute(
                select(Review.rating, func.count()).group_by(Review.rating).order_by(Review.rating)
            )
            by_status = await self.session.execute(
                select(Review.status, func.count()).group_by(Review.status)
            )
        except SQLAlchemyError as exc:
            logger.error("Failed to compute review stats: %s", exc, exc_info=True)
            raise StorageError("Failed to retrieve review statistics") from exc

        return {
            "total": total,
            "averageRating": round(float(average), 2) if average else 0,
            "byRating": {rating: count for rating, count in by_rating.all()},
            "byStatus": {status: count for status, count in by_status.all()},
        }
