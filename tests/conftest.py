"""Shared fixtures: a per-test SQLite database, an app client and review builders."""

import asyncio
from datetime import datetime
from itertools import count

import pytest
from fastapi.testclient import TestClient

from review_service.app import create_app
from review_service.database import build_engine, build_session_factory, init_models
from review_service.models import Review
from review_service.store import ReviewStore

_ids = count(1)


def make_review(
    rating=5,
    status="pending",
    created_at=datetime(2024, 1, 1, 10, 0, 0),
    updated_at=None,
    **overrides,
):
    """Build a transient Review with sensible defaults."""
    number = next(_ids)
    fields = {
        "id": f"review-{number:04d}",
        "customer_id": f"cust_{number:03d}",
        "customer_name": f"Customer {number}",
        "rating": rating,
        "title": f"Title {number}",
        "comment": f"Comment {number}",
        "status": status,
        "created_at": created_at,
        "updated_at": updated_at or created_at,
    }
    fields.update(overrides)
    return Review(**fields)


@pytest.fixture
def review_factory():
    return make_review


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'reviews.db'}"


@pytest.fixture
def app(database_url):
    return create_app(database_url)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def run_store(database_url):
    """Run ``action(store)`` against the test database and return its result."""

    def _run(action):
        async def _main():
            engine = build_engine(database_url)
            try:
                await init_models(engine)
                async with build_session_factory(engine)() as session:
                    return await action(ReviewStore(session))
            finally:
                await engine.dispose()

        return asyncio.run(_main())

    return _run


@pytest.fixture
def insert_reviews(run_store):
    def _insert(reviews):
        async def _add(store):
            return await store.add_all(reviews)

        return run_store(_add)

    return _insert
