"""Event models: scheduled occurrences owned by a venue, and their tags."""

import datetime as dt
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    TIMESTAMP,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.enums import EventCategory, EventStatus
from ..database import Base

if TYPE_CHECKING:
    from .venue import Venue


class Event(Base):
    """An event at exactly one venue on one date."""

    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    venue_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    category: Mapped[str] = mapped_column(
        String(10), nullable=False, default=EventCategory.BOTH.value
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EventStatus.PUBLISHED.value
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    venue: Mapped["Venue"] = relationship("Venue", back_populates="events")
    tags: Mapped[List["EventTag"]] = relationship(
        "EventTag", back_populates="event", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("category IN ('music', 'meals', 'both')", name="check_event_category"),
        CheckConstraint(
            "status IN ('draft', 'published', 'cancelled')", name="check_event_status"
        ),
        Index("idx_events_venue_date", "venue_id", "date"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, venue_id={self.venue_id}, date={self.date}, category={self.category})>"


class EventTag(Base):
    """One element of an event's tag set. Matching is exact and case-sensitive."""

    __tablename__ = "event_tags"

    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True
    )
    tag: Mapped[str] = mapped_column(String(64), primary_key=True)

    event: Mapped["Event"] = relationship("Event", back_populates="tags")

    __table_args__ = (Index("idx_event_tags_tag", "tag"),)

    def __repr__(self) -> str:
        return f"<EventTag(event_id={self.event_id}, tag={self.tag!r})>"
