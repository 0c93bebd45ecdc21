"""Boundary validation for review payloads.

Both entry points return a :class:`ValidationResult` and never raise; the
caller decides how to turn a failed result into an HTTP response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ValidationError

from review_service.models import REVIEW_STATUSES
from review_service.schemas import CreateReviewRequest, UpdateReviewRequest

_STRING_ERRORS = {"string_type", "string_too_short", "string_blank"}


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    value: Optional[Union[CreateReviewRequest, UpdateReviewRequest]] = None


def _describe(error: Dict[str, Any]) -> str:
    name = ".".join(str(part) for part in error.get("loc", ())) or "body"
    error_type = error.get("type", "")

    if error_type == "missing":
        return f"{name} is required"
    if name == "rating":
        return "rating must be an integer between 1 and 5"
    if name == "status":
        return f"status must be one of: {', '.join(REVIEW_STATUSES)}"
    if error_type in _STRING_ERRORS:
        return f"{name} must be a non-empty string"
    return f"{name}: {error.get('msg', 'invalid value')}"


def _validate(schema: Type[BaseModel], data: Any) -> ValidationResult:
    if not isinstance(data, dict):
        return ValidationResult(False, ["request body must be a JSON object"])

    try:
        value = schema.model_validate(data)
    except ValidationError as exc:
        errors: List[str] = []
        for error in exc.errors():
            message = _describe(error)
            if message not in errors:
                errors.append(message)
        return ValidationResult(False, errors)

    return ValidationResult(True, [], value)


def validate_create(data: Any) -> ValidationResult:
    """Validate a review creation payload."""
    return _validate(CreateReviewRequest, data)


def validate_update(data: Any) -> ValidationResult:
    """Validate a partial review update; absent fields are not checked."""
    return _validate(UpdateReviewRequest, data)
