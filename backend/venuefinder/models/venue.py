"""Venue model: the static identity of a place that hosts events."""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    TIMESTAMP,
    CheckConstraint,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.enums import (
    BarServiceType,
    FoodServiceType,
    SubscriptionTier,
    VerificationStatus,
)
from ..database import Base

if TYPE_CHECKING:
    from .event import Event


class Venue(Base):
    """A physical venue. Unique by (name, city, state)."""

    __tablename__ = "venues"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Identity
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    state: Mapped[str] = mapped_column(String(255), nullable=False)
    zipcode: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    lat: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    lng: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Presentation
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    food_service_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=FoodServiceType.NONE.value
    )
    bar_service_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BarServiceType.NONE.value
    )

    # Ownership / billing (owned by external collaborators, read here)
    owner_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    subscription_tier: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SubscriptionTier.FREE.value, index=True
    )

    # Crowdsourced verification
    verification_status: Mapped[str] = mapped_column(
        String(30), nullable=False, default=VerificationStatus.UNVERIFIED.value, index=True
    )
    positive_confirmations: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    negative_confirmations: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    events: Mapped[List["Event"]] = relationship(
        "Event", back_populates="venue", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("name", "city", "state", name="unique_venue_name_city_state"),
        CheckConstraint(
            "subscription_tier IN ('free', 'pro', 'enterprise')",
            name="check_venue_subscription_tier",
        ),
        CheckConstraint(
            "verification_status IN "
            "('UNVERIFIED', 'COMMUNITY_VERIFIED', 'OWNER_VERIFIED', 'FLAGGED')",
            name="check_venue_verification_status",
        ),
        Index("idx_venues_lat_lng", "lat", "lng"),
    )

    def __repr__(self) -> str:
        return f"<Venue(id={self.id}, name={self.name!r}, city={self.city!r}, state={self.state!r})>"
