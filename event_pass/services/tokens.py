"""Signed registration passes.

A pass is an HS256 JWT carrying ``studentId``, ``eventId`` and ``issuedAt``
(epoch milliseconds). It never expires on its own; it stops being accepted
once the registration it was stored on is deleted.
"""

import binascii
import time
from dataclasses import dataclass

import jwt
from jwt.utils import base64url_decode, base64url_encode

from event_pass.errors import EventPassError

ALGORITHM = "HS256"


class InvalidToken(EventPassError):
    message = "Invalid QR code"


@dataclass(frozen=True)
class Claim:
    student_id: int
    event_id: int
    issued_at: int  # epoch ms


def _as_id(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"invalid id: {value!r}")
    return value


def _is_canonical(token: str) -> bool:
    """Every segment must be the exact base64url encoding of its bytes.

    base64 decoding ignores the unused low bits of the last character, so
    without this check some one-character edits would still verify.
    """
    segments = token.split(".")
    if len(segments) != 3:
        return False
    for segment in segments:
        try:
            raw = base64url_decode(segment)
        except (ValueError, binascii.Error):
            return False
        if base64url_encode(raw).decode("ascii") != segment:
            return False
    return True


class TokenCodec:
    def __init__(self, secret: str):
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret

    def issue(self, student_id: int, event_id: int, issued_at: int | None = None) -> str:
        if issued_at is None:
            issued_at = int(time.time() * 1000)
        payload = {
            "studentId": _as_id(student_id),
            "eventId": _as_id(event_id),
            "issuedAt": issued_at,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> Claim:
        if not isinstance(token, str) or not _is_canonical(token):
            raise InvalidToken()
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.PyJWTError as exc:
            raise InvalidToken() from exc
        try:
            return Claim(
                student_id=_as_id(payload["studentId"]),
                event_id=_as_id(payload["eventId"]),
                issued_at=int(payload["issuedAt"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidToken() from exc
