from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, Index
from prayerfast.utils.timezone import utc_now

from prayerfast.db.base import Base


class FastReminderLog(Base):
    """Dedup ledger: one row per reminder slot already delivered."""
    __tablename__ = "fast_reminder_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    fast_id = Column(Integer, ForeignKey("fasts.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, nullable=False)
    date_key = Column(String(10), nullable=False)  # YYYY-MM-DD (UTC)
    time_key = Column(String(5), nullable=False)   # HH:MM (UTC)
    sent_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("fast_id", "date_key", "time_key", name="uq_fast_reminder_logs_slot"),
        Index("ix_fast_reminder_logs_user_id", "user_id"),
    )
