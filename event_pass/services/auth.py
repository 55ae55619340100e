"""Bearer-token principals.

Accounts and passwords live in the auth service; this module only issues and
reads the signed ``{sub, role}`` tokens it hands out.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from event_pass.config import settings
from event_pass.models.user import ADMIN, STUDENT

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


@dataclass(frozen=True)
class Principal:
    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN


def create_access_token(user_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=7))
    payload = {"sub": str(user_id), "role": role, "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)


def decode_principal(token: str) -> Optional[Principal]:
    """Return the principal for a valid token, ``None`` otherwise."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM])
    except jwt.PyJWTError as exc:
        logger.debug("Rejected access token: %s", exc)
        return None

    role = payload.get("role")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None
    if role not in {STUDENT, ADMIN}:
        return None
    return Principal(id=user_id, role=role)
