from sqlalchemy import Column, Integer, String, DateTime, Boolean, Index
from prayerfast.utils.timezone import utc_now

from prayerfast.db.base import Base


class DeviceToken(Base):
    __tablename__ = "device_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    platform = Column(String(16), nullable=False, index=True)  # ios, android, web
    token = Column(String(255), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_active_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    __table_args__ = (
        Index("ix_device_tokens_user_active", "user_id", "is_active"),
    )
