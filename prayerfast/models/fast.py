from sqlalchemy import Column, Integer, String, DateTime, Boolean, Index, CheckConstraint
from prayerfast.utils.timezone import utc_now

from prayerfast.db.base import Base
from .types import JSONType


FAST_STATUS_UPCOMING = "upcoming"
FAST_STATUS_ACTIVE = "active"
FAST_STATUS_COMPLETED = "completed"


class FastingSession(Base):
    """A timed fast. Status only moves upcoming -> active -> completed."""
    __tablename__ = "fasts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    status = Column(String(16), nullable=False, default=FAST_STATUS_UPCOMING)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    reminder_enabled = Column(Boolean, nullable=False, default=True)
    prayer_times = Column(JSONType, nullable=True)  # "HH:MM" strings, UTC
    prayer_focus = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    __table_args__ = (
        Index("ix_fasts_status_start", "status", "start_time"),
        Index("ix_fasts_status_end", "status", "end_time"),
        Index("ix_fasts_status_reminder", "status", "reminder_enabled"),
        CheckConstraint("status IN ('upcoming', 'active', 'completed')", name="ck_fasts_status"),
    )
