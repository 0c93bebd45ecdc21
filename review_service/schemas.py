"""Pydantic schemas for review payloads accepted by the HTTP surface."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from review_service.models import ReviewStatus


def _not_blank(value: str) -> str:
    # Accepted text is stored as sent; only all-whitespace values are refused.
    if not value.strip():
        raise PydanticCustomError("string_blank", "String should not be blank")
    return value


NonEmptyStr = Annotated[str, Field(strict=True, min_length=1), AfterValidator(_not_blank)]
Rating = Annotated[int, Field(strict=True, ge=1, le=5)]


class CreateReviewRequest(BaseModel):
    """Schema for review creation requests.

    Unknown keys are ignored so that ``id`` or timestamps sent by a client
    can never override system-managed fields.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        use_enum_values=True,
    )

    customer_id: NonEmptyStr = Field(alias="customerId")
    customer_name: NonEmptyStr = Field(alias="customerName")
    rating: Rating
    title: NonEmptyStr
    comment: NonEmptyStr
    status: ReviewStatus = ReviewStatus.PENDING.value

    @field_validator("status", mode="before")
    @classmethod
    def default_empty_status(cls, value: Any) -> Any:
        """``null`` and ``""`` mean "not given" on create."""
        if value is None or value == "":
            return ReviewStatus.PENDING.value
        return value


class UpdateReviewRequest(BaseModel):
    """Schema for partial review updates.

    Every field is optional, but a field that is sent must be valid: an
    explicit ``null`` fails validation because defaults are never validated
    while supplied values are.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        use_enum_values=True,
    )

    customer_id: NonEmptyStr = Field(None, alias="customerId")
    customer_name: NonEmptyStr = Field(None, alias="customerName")
    rating: Rating = None
    title: NonEmptyStr = None
    comment: NonEmptyStr = None
    status: ReviewStatus = None

    def changes(self) -> dict:
        """Return only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)
