import logging
from datetime import datetime
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session

from .dispatcher import PushOutcome
from .metrics import device_tokens_deactivated_total
from .repository import deactivate_tokens, touch_tokens

logger = logging.getLogger(__name__)

FCM_ERROR_PREFIX = "messaging/"


def _normalize_code(code: str) -> str:
    code = code.strip().lower()
    if code.startswith(FCM_ERROR_PREFIX):
        code = code[len(FCM_ERROR_PREFIX):]
    return code


class TokenHealthManager:
    """Deactivates tokens whose push failed with a permanent error code.

    Deactivation is one-way: only rows that are still active are updated, and
    nothing here ever sets ``is_active`` back to true.
    """

    def __init__(self, permanent_error_codes: Iterable[str]):
        self.permanent_error_codes = frozenset(_normalize_code(c) for c in permanent_error_codes if c)

    def is_permanent(self, error_code: Optional[str]) -> bool:
        if not error_code:
            return False
        return _normalize_code(error_code) in self.permanent_error_codes

    def apply(self, db: Session, user_id: int, outcomes: List[PushOutcome], now: datetime) -> int:
        """Apply push outcomes to the user's tokens. Returns how many were deactivated.

        Runs inside the caller's transaction.
        """
        invalid = [o.token for o in outcomes if not o.success and self.is_permanent(o.error_code)]
        delivered = [o.token for o in outcomes if o.success]

        touch_tokens(db, user_id, delivered, now)
        deactivated = deactivate_tokens(db, user_id, invalid, now)
        if deactivated:
            device_tokens_deactivated_total.inc(deactivated)
            logger.info(f"🧹 [TokenHealth] Deactivated {deactivated} token(s) for user {user_id}")
        return deactivated
