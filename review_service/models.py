# pylint: disable=not-callable
"""ORM models for the review service."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Text

from review_service.db_core import Base


class ReviewStatus(str, enum.Enum):
    """Moderation state of a review."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


REVIEW_STATUSES = tuple(status.value for status in ReviewStatus)


def utcnow() -> datetime:
    """Current UTC time as a naive datetime truncated to milliseconds."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def new_review_id() -> str:
    return str(uuid.uuid4())


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """Serialize a stored UTC timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


class Review(Base):
    """ORM model representing a single customer review.

    Timestamps are naive UTC datetimes; ``created_at`` is set once and
    ``updated_at`` is refreshed by the store on every mutation.
    """

    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="rating"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name="status"
        ),
    )

    id = Column(String(36), primary_key=True, default=new_review_id)
    customer_id = Column(String(255), nullable=False, index=True)
    customer_name = Column(String(255), nullable=False)
    rating = Column(Integer, nullable=False, index=True)
    title = Column(String(500), nullable=False)
    comment = Column(Text, nullable=False)
    status = Column(
        String(20), nullable=False, default=ReviewStatus.PENDING.value, index=True
    )
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Review id={self.id!r} rating={self.rating!r} status={self.status!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "customerName": self.customer_name,
            "rating": self.rating,
            "title": self.title,
            "comment": self.comment,
            "status": self.status,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
