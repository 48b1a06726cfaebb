from sqlalchemy import Column, Integer, String, DateTime, Index
from prayerfast.utils.timezone import utc_now

from prayerfast.db.base import Base
from .types import JSONType


class Notification(Base):
    """In-app notification shown in the user's inbox. Read state belongs to the client flows."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    type = Column(String(64), nullable=False, default="generic")
    title = Column(String, nullable=False)
    body = Column(String, nullable=True)
    data = Column(JSONType, nullable=True)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    __table_args__ = (
        Index("ix_notifications_user_created", "user_id", "created_at"),
    )
