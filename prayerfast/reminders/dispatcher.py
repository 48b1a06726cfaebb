from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol
import base64
import binascii
import json
import logging
import os

import firebase_admin
from firebase_admin import messaging, credentials, exceptions as firebase_exceptions
from sqlalchemy.orm import Session

from .config import settings
from .metrics import push_dispatch_success_total, push_dispatch_failed_total
from .repository import list_active_tokens

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushOutcome:
    token: str
    success: bool
    error_code: Optional[str] = None


class PushDeliveryAdapter(Protocol):
    def deliver(self, user_id: int, title: str, body: str, data: Dict[str, str]) -> List[PushOutcome]:
        ...


def _load_credentials_payload(raw: str) -> Optional[dict]:
    """Inline JSON or base64-encoded JSON; None when ``raw`` looks like a file path."""
    value = raw.strip()
    if value.startswith("{"):
        return json.loads(value)
    if os.path.exists(value):
        return None
    try:
        decoded = base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    return json.loads(decoded) if decoded.strip().startswith("{") else None


def _ensure_firebase_initialized() -> bool:
    """Initialise the default Firebase app once. Returns False when push is not configured."""
    if firebase_admin._apps:
        return True

    proj = settings.FCM_PROJECT_ID
    creds_json = (
        settings.FCM_CREDENTIALS_JSON
        or os.getenv("GOOGLE_APPLICATION_CREDENTIALS_JSON")
        or os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    )
    options = {"httpTimeout": settings.PUSH_TIMEOUT_SECONDS}
    if proj:
        options["projectId"] = proj

    if not creds_json or creds_json.strip() == "":
        if not proj:
            logger.warning("⚠️  [FCM] No credentials provided - push notifications are disabled")
            return False
        logger.info(f"🔍 [FCM] Initializing Firebase with project id only | project_id={proj}")
        firebase_admin.initialize_app(options=options)
        return True

    payload = _load_credentials_payload(creds_json)
    if payload is not None:
        logger.info("🔍 [FCM] Using inline JSON credentials")
        cred = credentials.Certificate(payload)
    elif os.path.exists(creds_json.strip()):
        logger.info(f"🔍 [FCM] Using file-based credentials: {creds_json.strip()}")
        cred = credentials.Certificate(creds_json.strip())
    else:
        logger.error("❌ [FCM] Credentials are neither JSON nor an existing file - push notifications are disabled")
        return False

    firebase_admin.initialize_app(cred, options=options)
    logger.info(f"✅ [FCM] Firebase app initialized | project_id={proj}")
    return True


def fcm_error_code(exc: Optional[Exception]) -> str:
    """Map a per-token FCM exception onto a ``messaging/...`` error code."""
    if isinstance(exc, messaging.UnregisteredError):
        return "messaging/registration-token-not-registered"
    if isinstance(exc, messaging.SenderIdMismatchError):
        return "messaging/mismatched-credential"
    if isinstance(exc, firebase_exceptions.InvalidArgumentError):
        # Bad tokens and bad payloads share this type
        if "registration token" in str(exc).lower():
            return "messaging/invalid-registration-token"
        return "messaging/invalid-argument"
    code = getattr(exc, "code", None)
    if code:
        return "messaging/" + str(code).lower().replace("_", "-")
    return "messaging/unknown-error"


def build_message(token: str, title: str, body: str, data: Dict[str, str]) -> messaging.Message:
    return messaging.Message(
        token=token,
        notification=messaging.Notification(title=title, body=body),
        data={str(k): str(v) for k, v in (data or {}).items()},
        android=messaging.AndroidConfig(priority="high"),
        apns=messaging.APNSConfig(
            headers={
                "apns-push-type": "alert",
                "apns-priority": "10",
            },
            payload=messaging.APNSPayload(aps=messaging.Aps(sound="default")),
        ),
    )


class FcmPushAdapter:
    """Fans one notification out to every active token of a user through FCM."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        initializer: Callable[[], bool] = _ensure_firebase_initialized,
    ):
        self.session_factory = session_factory
        self.initializer = initializer

    def _active_tokens(self, user_id: int) -> List[str]:
        db = self.session_factory()
        try:
            return list_active_tokens(db, user_id)
        finally:
            db.close()

    def deliver(self, user_id: int, title: str, body: str, data: Dict[str, str]) -> List[PushOutcome]:
        if not self.initializer():
            logger.warning(f"⚠️  [FCM] Firebase not initialized - skipping push for user {user_id}")
            return []

        tokens = self._active_tokens(user_id)
        if not tokens:
            logger.info(f"🔍 [FCM] No active device tokens for user {user_id}")
            return []

        messages = [build_message(token, title, body, data) for token in tokens]
        batch = messaging.send_each(messages)

        outcomes: List[PushOutcome] = []
        for token, response in zip(tokens, batch.responses):
            if response.success:
                push_dispatch_success_total.inc()
                outcomes.append(PushOutcome(token=token, success=True))
            else:
                push_dispatch_failed_total.inc()
                code = fcm_error_code(response.exception)
                logger.warning(f"❌ [FCM] Delivery failed | user={user_id} token={token[:20]}... code={code}")
                outcomes.append(PushOutcome(token=token, success=False, error_code=code))
        logger.info(
            f"🚀 [FCM] Sent to user {user_id}: success={batch.success_count} failed={batch.failure_count}"
        )
        return outcomes
