"""Unit tests for review payload validation."""

import pytest

from review_service.validation import validate_create, validate_update


@pytest.fixture
def valid_payload():
    return {
        "customerId": "cust_123",
        "customerName": "John Doe",
        "rating": 5,
        "title": "Great service!",
        "comment": "I was very satisfied with the product.",
    }


def test_valid_create_defaults_to_pending(valid_payload):
    result = validate_create(valid_payload)

    assert result.is_valid
    assert result.errors == []
    assert result.value.status == "pending"
    assert result.value.model_dump()["customer_id"] == "cust_123"


def test_create_accepts_explicit_status(valid_payload):
    result = validate_create({**valid_payload, "status": "approved"})
    assert result.is_valid
    assert result.value.status == "approved"


def test_create_reports_every_missing_field():
    result = validate_create({})

    assert not result.is_valid
    for name in ("customerId", "customerName", "title", "comment", "rating"):
        assert f"{name} is required" in result.errors


@pytest.mark.parametrize("rating", [0, 6, 4.5, "5", True])
def test_create_rejects_bad_rating(valid_payload, rating):
    result = validate_create({**valid_payload, "rating": rating})

    assert not result.is_valid
    assert result.errors == ["rating must be an integer between 1 and 5"]


def test_create_rejects_unknown_status(valid_payload):
    result = validate_create({**valid_payload, "status": "archived"})

    assert not result.is_valid
    assert result.errors == ["status must be one of: pending, approved, rejected"]


@pytest.mark.parametrize("value", ["", "   ", 42])
def test_create_rejects_empty_or_non_string_title(valid_payload, value):
    result = validate_create({**valid_payload, "title": value})

    assert not result.is_valid
    assert result.errors == ["title must be a non-empty string"]


def test_create_ignores_system_managed_fields(valid_payload):
    result = validate_create({**valid_payload, "id": "forged", "createdAt": "2020-01-01"})

    assert result.is_valid
    assert "id" not in result.value.model_dump()


@pytest.mark.parametrize("payload", [None, [], "text", 5])
def test_non_object_payload_is_rejected(payload):
    result = validate_create(payload)
    assert not result.is_valid
    assert result.errors == ["request body must be a JSON object"]


def test_empty_update_is_valid():
    result = validate_update({})
    assert result.is_valid
    assert result.value.changes() == {}


def test_update_only_reports_provided_fields():
    result = validate_update({"rating": 3, "status": "rejected"})

    assert result.is_valid
    assert result.value.changes() == {"rating": 3, "status": "rejected"}


def test_update_rejects_explicit_null():
    result = validate_update({"title": None})

    assert not result.is_valid
    assert result.errors == ["title must be a non-empty string"]


def test_update_applies_range_checks():
    result = validate_update({"rating": 9, "status": "done"})

    assert not result.is_valid
    assert "rating must be an integer between 1 and 5" in result.errors
    assert "status must be one of: pending, approved, rejected" in result.errors


def test_create_keeps_surrounding_whitespace(valid_payload):
    result = validate_create({**valid_payload, "title": "  padded  "})

    assert result.is_valid
    assert result.value.title == "  padded  "


@pytest.mark.parametrize("status", [None, ""])
def test_create_treats_empty_status_as_pending(valid_payload, status):
    result = validate_create({**valid_payload, "status": status})

    assert result.is_valid
    assert result.value.status == "pending"


def test_update_rejects_explicit_null_status():
    result = validate_update({"status": None})
    assert result.errors == ["status must be one of: pending, approved, rejected"]


def test_update_rejects_blank_comment():
    result = validate_update({"comment": " \t "})
    assert result.errors == ["comment must be a non-empty string"]
