"""
Queue payloads and API schemas for the reminder engine
"""
from datetime import datetime
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


DATE_KEY_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_KEY_PATTERN = r"^\d{2}:\d{2}$"


class ReminderJob(BaseModel):
    """Payload of a prayer reminder job. Serialized with camelCase keys on the wire."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    fast_id: int = Field(..., alias="fastId")
    user_id: int = Field(..., alias="userId")
    date_key: str = Field(..., alias="dateKey", pattern=DATE_KEY_PATTERN)
    time_key: str = Field(..., alias="timeKey", pattern=TIME_KEY_PATTERN)
    title: str
    body: str
    data: Dict[str, str] = Field(default_factory=dict)

    def to_message(self) -> dict:
        return self.model_dump(by_alias=True)


class DeviceTokenRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    platform: str
    token: str
    is_active: bool
    last_active_at: Optional[datetime] = None
    updated_at: datetime


class DeviceTokenDeactivate(BaseModel):
    user_id: int
    token: str


class InactiveTokenCleanup(BaseModel):
    deleted: int


class ReminderLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    fast_id: int
    user_id: int
    date_key: str
    time_key: str
    sent_at: datetime
