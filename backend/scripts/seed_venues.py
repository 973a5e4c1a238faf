#!/usr/bin/env python3
# backend/scripts/seed_venues.py
"""
Create the schema and load sample venues, events and saves for local development.

Usage:
    python scripts/seed_venues.py            # seed relative to today
    python scripts/seed_venues.py --reset    # drop and recreate tables first
"""

import argparse
from datetime import date, timedelta
import logging
from pathlib import Path
import sys
from typing import List

# Add backend to Python path
sys.path.append(str(Path(__file__).parent.parent))

from venuefinder.database import Base, SessionLocal, engine  # noqa: E402
from venuefinder.models import Event, EventTag, SavedEvent, Venue  # noqa: E402

logger = logging.getLogger("seed_venues")

SAMPLE_VENUES = [
    # name, city, state, zipcode, lat, lng, tier, food, bar
    ("The Continental Club", "Austin", "TX", "78704", 30.2496, -97.7494, "pro", "bar_bites", "full_bar"),
    ("Cheer Up Charlies", "Austin", "TX", "78701", 30.2670, -97.7360, "free", "none", "full_bar"),
    ("Franklin Barbecue", "Austin", "TX", "78702", 30.2701, -97.7313, "enterprise", "full_menu", "alcoholic_only"),
    ("Saxon Pub", "Austin", "TX", "78704", 30.2505, -97.7640, "free", "bar_bites", "full_bar"),
    ("Deep Ellum Art Co", "Dallas", "TX", "75226", 32.7847, -96.7836, "pro", "full_menu", "full_bar"),
    ("Tipitina's", "New Orleans", "LA", "70115", 29.9178, -90.1029, "free", "bar_bites", "full_bar"),
    ("Mystery Spot Cafe", "Marfa", "TX", "79843", None, None, "free", "full_menu", "non_alcoholic"),
]


def _parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed sample venue data for local development.")
    parser.add_argument("--reset", action="store_true", help="Drop all tables before seeding")
    parser.add_argument(
        "--days", type=int, default=21, help="Spread events over this many days (default: 21)"
    )
    return parser.parse_args(argv)


def seed(days: int, today: date) -> int:
    session = SessionLocal()
    created = 0
    try:
        venues = []
        for name, city, state, zipcode, lat, lng, tier, food, bar in SAMPLE_VENUES:
            venue = Venue(
                name=name,
                city=city,
                state=state,
                zipcode=zipcode,
                lat=lat,
                lng=lng,
                subscription_tier=tier,
                food_service_type=food,
                bar_service_type=bar,
            )
            session.add(venue)
            venues.append(venue)
        session.flush()

        categories = ["music", "meals", "both"]
        for index, venue in enumerate(venues):
            for offset in range(index % 3, days, 3):
                event = Event(
                    venue_id=venue.id,
                    date=today + timedelta(days=offset),
                    category=categories[(index + offset) % 3],
                    description=f"{venue.name} night {offset}",
                )
                event.tags.append(EventTag(tag="live" if offset % 2 == 0 else "brunch"))
                session.add(event)
                created += 1
        session.flush()

        events = session.query(Event).order_by(Event.id).all()
        for user_id in range(1, 6):
            for event in events[user_id::4]:
                session.add(SavedEvent(user_id=user_id, event_id=event.id))

        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
    return created


def main(argv: List[str]) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    args = _parse_args(argv)

    if args.reset:
        logger.info("Dropping all tables")
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    created = seed(args.days, date.today())
    logger.info(f"Seeded {len(SAMPLE_VENUES)} venues and {created} events")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
