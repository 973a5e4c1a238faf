"""
Shared fixtures for the venuefinder test suite.

The application settings are pointed at an in-memory SQLite database and
the in-memory cache store before anything from venuefinder is imported.
"""

from datetime import date
import os
from typing import Callable, Dict, Iterable, Optional

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["REDIS_URL"] = ""
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from venuefinder.database import Base, install_sqlite_functions  # noqa: E402

# Import models so Base.metadata is populated for create_all.
from venuefinder.models import Event, EventTag, SavedEvent, Venue  # noqa: E402
from venuefinder.services.cache_service import InMemoryCacheStore  # noqa: E402

AUSTIN = (30.2672, -97.7431)


@pytest.fixture
def db_engine() -> Iterable[Engine]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _record):
        install_sqlite_functions(dbapi_connection)

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(db_engine: Engine) -> Iterable[Session]:
    SessionLocal = sessionmaker(bind=db_engine, expire_on_commit=False, future=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_venue(db: Session) -> Callable[..., Venue]:
    def _make(
        name: str,
        city: str = "Austin",
        state: str = "TX",
        zipcode: Optional[str] = None,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        subscription_tier: str = "free",
        owner_id: Optional[int] = None,
    ) -> Venue:
        venue = Venue(
            name=name,
            city=city,
            state=state,
            zipcode=zipcode,
            lat=lat,
            lng=lng,
            subscription_tier=subscription_tier,
            owner_id=owner_id,
        )
        db.add(venue)
        db.commit()
        return venue

    return _make


@pytest.fixture
def make_event(db: Session) -> Callable[..., Event]:
    def _make(
        venue: Venue,
        on: date,
        category: str = "music",
        tags: Iterable[str] = (),
        status: str = "published",
        saves: int = 0,
    ) -> Event:
        event_row = Event(
            venue_id=venue.id,
            date=on,
            category=category,
            status=status,
            description=f"{venue.name} {category} {on.isoformat()}",
        )
        for tag in tags:
            event_row.tags.append(EventTag(tag=tag))
        db.add(event_row)
        db.flush()
        for user_id in range(1, saves + 1):
            db.add(SavedEvent(user_id=user_id, event_id=event_row.id))
        db.commit()
        return event_row

    return _make


@pytest.fixture
def catalog(make_venue, make_event) -> Dict[str, object]:
    """
    Small search catalog:

    blue_note  Austin TX 78701   free  at AUSTIN     music 06-08 [jazz, live], meals 06-12,
                                                     draft music 06-01
    pro_hall   Austin TX 78702   pro   ~0.3mi away   music 06-10 [live]
    far_club   Dallas TX 75201   free  ~180mi away   both 06-07
    no_coords  Austin TX 78703   free  no lat/lng    meals 06-08 [brunch]
    bayou      New Orleans LA    free                music 06-09
    """
    blue_note = make_venue("Blue Note", zipcode="78701", lat=AUSTIN[0], lng=AUSTIN[1])
    pro_hall = make_venue(
        "Pro Hall", zipcode="78702", lat=30.2700, lng=-97.7400, subscription_tier="pro"
    )
    far_club = make_venue("Far Club", city="Dallas", zipcode="75201", lat=32.7767, lng=-96.7970)
    no_coords = make_venue("No Coords Cafe", zipcode="78703")
    bayou = make_venue(
        "Bayou Room", city="New Orleans", state="LA", zipcode="70115", lat=29.9178, lng=-90.1029
    )

    return {
        "blue_note": blue_note,
        "pro_hall": pro_hall,
        "far_club": far_club,
        "no_coords": no_coords,
        "bayou": bayou,
        "blue_note_music": make_event(blue_note, date(2024, 6, 8), "music", tags=["jazz", "live"]),
        "blue_note_meals": make_event(blue_note, date(2024, 6, 12), "meals"),
        "blue_note_draft": make_event(blue_note, date(2024, 6, 1), "music", status="draft"),
        "pro_hall_music": make_event(pro_hall, date(2024, 6, 10), "music", tags=["live"]),
        "far_club_both": make_event(far_club, date(2024, 6, 7), "both"),
        "no_coords_meals": make_event(no_coords, date(2024, 6, 8), "meals", tags=["brunch"]),
        "bayou_music": make_event(bayou, date(2024, 6, 9), "music"),
    }


@pytest.fixture
def memory_store() -> InMemoryCacheStore:
    return InMemoryCacheStore()
