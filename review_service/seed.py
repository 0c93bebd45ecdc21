"""
Sample data seeding for the review dashboard.

Generates realistic reviews spread over the last N days so the metrics and
usage endpoints have something to show.

Usage:
  python -m review_service.seed --days 30
  python -m review_service.seed --days 90 --clear --seed 42
"""

import argparse
import asyncio
import logging
import random
import sys
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from review_service import config
from review_service.database import build_engine, build_session_factory, init_models
from review_service.models import Review, new_review_id, utcnow
from review_service.store import ReviewStore

logger = logging.getLogger(__name__)

CUSTOMERS = [
    ("cust_001", "Alice Johnson"),
    ("cust_002", "Bob Smith"),
    ("cust_003", "Carol Davis"),
    ("cust_004", "David Wilson"),
    ("cust_005", "Emma Brown"),
    ("cust_006", "Frank Miller"),
    ("cust_007", "Grace Taylor"),
    ("cust_008", "Henry Clark"),
    ("cust_009", "Ivy Anderson"),
    ("cust_010", "Jack Thompson"),
    ("cust_011", "Kate Martinez"),
    ("cust_012", "Liam Garcia"),
]

TEMPLATES: Dict[int, List[tuple]] = {
    5: [
        ("Outstanding service!", "The product quality exceeded my expectations and the support team was excellent."),
        ("Highly recommended!", "Amazing experience from start to finish. Will definitely order again."),
        ("Perfect!", "Everything was exactly as described. Fast shipping and great packaging."),
    ],
    4: [
        ("Good experience", "Overall satisfied with the purchase. Fast delivery and good packaging."),
        ("Solid product", "Good quality product, though delivery took a bit longer than expected."),
        ("Happy customer", "Product works well and customer service was responsive."),
    ],
    3: [
        ("Average product", "The product is okay but could be improved. Support was helpful though."),
        ("Mixed feelings", "Some aspects are good, others could be better. Decent overall experience."),
        ("Could be better", "Product is functional but I expected more for the price."),
    ],
    2: [
        ("Disappointing", "Product quality was lower than expected. Shipping was delayed."),
        ("Not as described", "The product doesn't match the description. Had to contact support."),
        ("Underwhelming", "Expected better quality. Customer service was slow to respond."),
    ],
    1: [
        ("Terrible experience", "Product arrived damaged and customer service was unresponsive."),
        ("Complete waste", "Product doesn't work at all. Requesting a full refund."),
        ("Avoid this", "Save your money. The product is useless and support is non-existent."),
    ],
}

RATING_WEIGHTS = {5: 0.35, 4: 0.30, 3: 0.15, 2: 0.13, 1: 0.07}
STATUS_WEIGHTS = {"pending": 0.4, "approved": 0.5, "rejected": 0.1}
WEEKEND_FACTOR = 0.3


def generate_sample_reviews(
    days_back: int = 30,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> List[Review]:
    """
    Build sample reviews for each of the last ``days_back`` days.

    Weekdays get 2-10 reviews, weekends roughly a third of that. Ratings
    lean positive and review times fall between 08:00 and 23:59.
    """
    rng = rng or random.Random()
    now = now or utcnow()
    reviews = []

    for day_offset in range(days_back):
        day = (now - timedelta(days=day_offset)).replace(hour=0, minute=0, second=0, microsecond=0)
        factor = WEEKEND_FACTOR if day.weekday() >= 5 else 1.0
        per_day = int(rng.uniform(2, 10) * factor)

        for _ in range(per_day):
            customer_id, customer_name = rng.choice(CUSTOMERS)
            rating = rng.choices(list(RATING_WEIGHTS), weights=list(RATING_WEIGHTS.values()))[0]
            title, comment = rng.choice(TEMPLATES[rating])
            status = rng.choices(list(STATUS_WEIGHTS), weights=list(STATUS_WEIGHTS.values()))[0]
            created = day + timedelta(
                hours=rng.randint(8, 23), minutes=rng.randint(0, 59), seconds=rng.randint(0, 59)
            )
            reviews.append(
                Review(
                    id=new_review_id(),
                    customer_id=customer_id,
                    customer_name=customer_name,
                    rating=rating,
                    title=title,
                    comment=comment,
                    status=status,
                    created_at=created,
                    updated_at=created,
                )
            )

    reviews.sort(key=lambda review: review.created_at, reverse=True)
    return reviews


async def seed_database(
    database_url: str, days_back: int = 30, clear: bool = False, seed: Optional[int] = None
) -> dict:
    """Insert generated reviews and return the resulting table statistics."""
    engine = build_engine(database_url)
    try:
        await init_models(engine)
        async with build_session_factory(engine)() as session:
            store = ReviewStore(session)
            if clear:
                await store.clear()
            added = await store.add_all(generate_sample_reviews(days_back, random.Random(seed)))
            stats = await store.stats()
    finally:
        await engine.dispose()

    return {"reviewsAdded": added, "stats": stats}


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Seed the review database with sample data")
    parser.add_argument("--days", type=int, default=30, help="Number of days back to generate")
    parser.add_argument("--clear", action="store_true", help="Delete existing reviews first")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible data")
    parser.add_argument("--database-url", default=config.DATABASE_URL, help="Database URL")
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    try:
        result = asyncio.run(seed_database(args.database_url, args.days, args.clear, args.seed))
    except Exception as exc:
        logger.error("Seeding failed: %s", exc, exc_info=True)
        return 1

    logger.info("Generated %d reviews", result["reviewsAdded"])
    logger.info("Database stats: %s", result["stats"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
