"""User bookmarks of events; the source of trending save counts."""

from datetime import datetime

from sqlalchemy import TIMESTAMP, ForeignKey, Integer, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class SavedEvent(Base):
    """Junction table for users bookmarking events."""

    __tablename__ = "saved_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (UniqueConstraint("user_id", "event_id", name="unique_user_saved_event"),)

    def __repr__(self) -> str:
        return f"<SavedEvent(user={self.user_id}, event={self.event_id})>"
