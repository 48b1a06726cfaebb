from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from prayerfast.db.session import get_db
from prayerfast.api.deps import verify_api_key_dependency
from prayerfast.models import DeviceToken
from prayerfast.utils.timezone import utc_now
from .config import settings
from .repository import list_device_tokens, list_reminder_logs, cleanup_inactive_tokens, retention_cutoff
from .schemas import DeviceTokenRead, DeviceTokenDeactivate, InactiveTokenCleanup, ReminderLogRead


router = APIRouter(dependencies=[Depends(verify_api_key_dependency)])


@router.get("/devices", response_model=List[DeviceTokenRead])
def list_devices_endpoint(user_id: int, db: Session = Depends(get_db)):
    """List a user's device tokens, most recently updated first."""
    return list_device_tokens(db, user_id=user_id)


@router.post("/devices/deactivate", response_model=DeviceTokenRead)
def deactivate_device_endpoint(payload: DeviceTokenDeactivate, db: Session = Depends(get_db)):
    """Deactivate one token, e.g. on logout."""
    token = (
        db.query(DeviceToken)
        .filter(DeviceToken.user_id == payload.user_id, DeviceToken.token == payload.token)
        .first()
    )
    if not token:
        raise HTTPException(status_code=404, detail="Device token not found")
    if token.is_active:
        token.is_active = False
        token.updated_at = utc_now()
        db.add(token)
        db.commit()
        db.refresh(token)
    return token


@router.delete("/devices/inactive", response_model=InactiveTokenCleanup)
def cleanup_inactive_devices_endpoint(
    user_id: int,
    older_than_days: int = Query(default=settings.INACTIVE_TOKEN_RETENTION_DAYS, ge=0),
    db: Session = Depends(get_db),
):
    cutoff = retention_cutoff(utc_now(), older_than_days)
    deleted = cleanup_inactive_tokens(db, older_than=cutoff, user_id=user_id)
    return InactiveTokenCleanup(deleted=deleted)


@router.get("/fasts/{fast_id}/reminders", response_model=List[ReminderLogRead])
def list_fast_reminders_endpoint(
    fast_id: int,
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Reminder slots already delivered for a fasting session."""
    return list_reminder_logs(db, fast_id=fast_id, limit=limit)
