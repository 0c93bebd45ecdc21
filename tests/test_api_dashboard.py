"""HTTP tests for the metrics, usage and export endpoints."""

import csv
import io
import xml.etree.ElementTree as ET
from datetime import datetime

import pytest

from review_service.dependencies import get_store
from review_service.store import StorageError


@pytest.fixture
def stored(client, review_factory, insert_reviews):
    reviews = [
        review_factory(rating=5, status="approved", created_at=datetime(2024, 1, 8, 9)),
        review_factory(rating=4, status="approved", created_at=datetime(2024, 1, 9, 10)),
        review_factory(rating=3, status="pending", created_at=datetime(2024, 1, 9, 11)),
        review_factory(rating=1, status="rejected", created_at=datetime(2024, 1, 10, 12)),
        review_factory(rating=5, status="approved", created_at=datetime(2024, 1, 2, 8)),
    ]
    insert_reviews(reviews)
    return reviews


def test_timeseries(client, stored):
    response = client.get(
        "/api/metrics/timeseries", params={"startDate": "2024-01-08", "endDate": "2024-01-11"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["meta"] == {"startDate": "2024-01-08", "endDate": "2024-01-11", "totalDays": 4}
    assert [b["date"] for b in body["data"]] == [
        "2024-01-08",
        "2024-01-09",
        "2024-01-10",
        "2024-01-11",
    ]
    assert [b["reviewsSubmitted"] for b in body["data"]] == [1, 2, 1, 0]
    assert body["data"][1]["averageRating"] == 3.5
    assert body["data"][2]["escalations"] == 1


def test_timeseries_with_requested_metrics(client, stored):
    body = client.get(
        "/api/metrics/timeseries",
        params={"startDate": "2024-01-08", "endDate": "2024-01-08", "metrics": "fiveStarCount,bogus"},
    ).json()

    assert body["data"] == [{"date": "2024-01-08", "fiveStarCount": 1}]
    assert body["meta"]["requestedMetrics"] == ["fiveStarCount", "bogus"]


def test_timeseries_defaults_to_last_thirty_days(client):
    body = client.get("/api/metrics/timeseries").json()
    assert body["meta"]["totalDays"] == 31


def test_timeseries_with_bad_date(client):
    response = client.get("/api/metrics/timeseries", params={"startDate": "yesterday-ish"})

    assert response.status_code == 400
    assert response.json()["details"] == ["startDate must be an ISO-8601 date"]


def test_summary(client, stored):
    body = client.get(
        "/api/metrics/summary",
        params={"startDate": "2024-01-08", "endDate": "2024-01-14"},
    ).json()

    data = body["data"]
    assert data["metrics"]["totalReviews"] == 4
    assert data["metrics"]["averageRating"] == 3.25
    assert data["metrics"]["satisfactionScore"] == 50.0
    assert data["comparison"]["mode"] == "previous_period"
    assert data["comparison"]["previous"]["totalReviews"] == 1
    assert data["comparison"]["changes"]["totalReviews"] == 300.0


def test_summary_without_comparison(client, stored):
    body = client.get(
        "/api/metrics/summary",
        params={"startDate": "2024-01-08", "endDate": "2024-01-14", "comparison": "none"},
    ).json()
    assert body["data"]["comparison"] is None


@pytest.mark.parametrize(
    "params",
    [
        {"comparison": "last_week"},
        {"startDate": "2024-13-45"},
        {"startDate": "2024-01-10", "endDate": "2024-01-01"},
    ],
)
def test_summary_rejects_bad_parameters(client, params):
    response = client.get("/api/metrics/summary", params=params)

    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_usage_details_statistics_ignore_pagination(client, stored):
    body = client.get("/api/usage/details", params={"sentiment": "Positive", "limit": 1}).json()
    data = body["data"]

    assert len(data["records"]) == 1
    assert data["records"][0]["sentiment"] == "Positive"
    assert data["pagination"] == {"total": 3, "limit": 1, "offset": 0, "hasMore": True}
    assert data["statistics"]["total"] == 3
    assert data["filters"]["sentiment"] == "Positive"
    assert data["filters"]["sortBy"] == "createdAt"


def test_usage_details_sort_order_reverses(client, stored):
    descending = client.get(
        "/api/usage/details", params={"sortBy": "rating", "sortOrder": "desc"}
    ).json()["data"]["records"]
    ascending = client.get(
        "/api/usage/details", params={"sortBy": "rating", "sortOrder": "asc"}
    ).json()["data"]["records"]

    assert [r["rating"] for r in descending] == [5, 5, 4, 3, 1]
    assert [r["rating"] for r in ascending] == [1, 3, 4, 5, 5]


def test_usage_details_rejects_unknown_sort_field(client):
    response = client.get("/api/usage/details", params={"sortBy": "shoeSize"})
    assert response.status_code == 400


def test_usage_details_pushes_status_filter_down(client, stored):
    data = client.get("/api/usage/details", params={"status": "approved"}).json()["data"]
    assert data["pagination"]["total"] == 3
    assert {r["status"] for r in data["records"]} == {"approved"}


def test_usage_summary(client, stored):
    data = client.get("/api/usage/summary").json()["data"]

    assert data["totalRecords"] == 5
    assert data["priorityBreakdown"] == {"Low": 3, "Medium": 1, "High": 1}


@pytest.mark.parametrize(
    "accept,content_type,extension",
    [
        ("text/csv", "text/csv", "csv"),
        ("application/xml", "application/xml", "xml"),
        ("application/json", "application/json", "json"),
        (None, "application/json", "json"),
    ],
)
def test_export_negotiates_format(client, stored, accept, content_type, extension):
    headers = {"Accept": accept} if accept else {}
    response = client.get("/api/export", headers=headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(content_type)
    assert (
        response.headers["content-disposition"]
        == f"attachment; filename=reviews_export.{extension}"
    )


def test_export_csv_body(client, stored):
    response = client.get("/api/export", headers={"Accept": "text/html,text/csv;q=0.9"})

    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert len(rows) == 5
    assert {row["id"] for row in rows} == {review.id for review in stored}


def test_export_xml_body(client, stored):
    response = client.get("/api/export", headers={"Accept": "application/xml"})

    root = ET.fromstring(response.content)
    assert len(root.findall("review")) == 5


def test_export_json_body(client, stored):
    body = client.get("/api/export", headers={"Accept": "application/json"}).json()

    assert body["metadata"]["totalRecords"] == 5
    assert body["metadata"]["source"] == "customer_reviews"
    assert len(body["data"]) == 5


def test_legacy_csv_export_uses_filters(client, stored):
    response = client.get("/api/export/csv", params={"status": "approved"})

    assert response.headers["content-disposition"] == "attachment; filename=reviews.csv"
    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert {row["status"] for row in rows} == {"approved"}
    assert len(rows) == 3


def test_legacy_json_export(client, stored):
    body = client.get("/api/export/json", params={"rating": 5, "limit": 1}).json()

    assert body["totalRecords"] == 2
    assert body["filters"] == {"rating": 5, "limit": 1}
    assert len(body["data"]) == 1


def test_export_summary(client, stored):
    data = client.get("/api/export/summary").json()["data"]

    assert data["totalReviews"] == 5
    assert data["averageRating"] == 3.6
    assert data["statusBreakdown"] == {"approved": 3, "pending": 1, "rejected": 1}
    assert data["ratingBreakdown"] == {"1": 1, "3": 1, "4": 1, "5": 2}


class BrokenStore:
    async def all(self):
        raise StorageError("Failed to retrieve filtered reviews")


def test_storage_failure_is_a_500(app, client):
    app.dependency_overrides[get_store] = lambda: BrokenStore()
    try:
        response = client.get("/api/usage/summary")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Internal server error"}


def test_timeseries_on_last_day_of_calendar(client):
    response = client.get(
        "/api/metrics/timeseries", params={"startDate": "9999-12-31", "endDate": "9999-12-31"}
    )

    assert response.status_code == 200
    assert [b["date"] for b in response.json()["data"]] == ["9999-12-31"]


def test_timeseries_default_start_near_first_day(client):
    response = client.get("/api/metrics/timeseries", params={"endDate": "0001-01-05"})

    assert response.status_code == 200
    assert response.json()["meta"]["startDate"] == "0001-01-01"


@pytest.mark.parametrize("comparison", ["previous_period", "last_year"])
def test_summary_comparison_before_first_year(client, comparison):
    response = client.get(
        "/api/metrics/summary",
        params={"startDate": "0001-01-01", "endDate": "0001-01-02", "comparison": comparison},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_timeseries_range_is_capped(client):
    response = client.get(
        "/api/metrics/timeseries", params={"startDate": "0001-01-01", "endDate": "9999-12-30"}
    )

    assert response.status_code == 400
    assert response.json()["details"][0].startswith("date range must not exceed")


def test_timeseries_range_at_cap_is_accepted(client):
    response = client.get(
        "/api/metrics/timeseries", params={"startDate": "2024-01-01", "endDate": "2024-12-31"}
    )

    assert response.status_code == 200
    assert response.json()["meta"]["totalDays"] == 366
