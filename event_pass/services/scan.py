"""Attendance scanning.

A registration moves from unscanned to scanned exactly once. The transition is
a conditional UPDATE on ``scanned = 0``; whoever loses a race gets the same
answer as a repeated scan, with the winner's timestamp.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from event_pass.errors import NotFound
from event_pass.models import Registration
from event_pass.services.tokens import TokenCodec
from event_pass.utils.time import utcnow

logger = logging.getLogger(__name__)


class RegistrationNotFound(NotFound):
    message = "Registration not found"


@dataclass
class ScanResult:
    registration: Registration
    already_scanned: bool

    @property
    def scanned_at(self) -> datetime:
        return self.registration.scanned_at  # type: ignore[return-value]


async def scan(session: AsyncSession, codec: TokenCodec, token: str, scanner_id: int) -> ScanResult:
    claim = codec.verify(token)

    # The stored token must match verbatim, not just carry the same ids
    registration = (
        await session.execute(
            select(Registration).where(
                Registration.token == token,  # type: ignore[arg-type]
                Registration.student_id == claim.student_id,  # type: ignore[arg-type]
                Registration.event_id == claim.event_id,  # type: ignore[arg-type]
            )
        )
    ).scalars().first()
    if registration is None:
        logger.info(
            "Scan rejected, no registration for student %s event %s",
            claim.student_id,
            claim.event_id,
        )
        raise RegistrationNotFound()

    if registration.scanned:
        return ScanResult(registration, already_scanned=True)

    result = await session.execute(
        update(Registration)
        .where(
            Registration.id == registration.id,  # type: ignore[arg-type]
            Registration.scanned.is_(False),  # type: ignore[attr-defined]
        )
        .values(scanned=True, scanned_at=utcnow(), scanned_by=scanner_id)
        .execution_options(synchronize_session=False)
    )
    await session.commit()

    registration = await session.get(Registration, registration.id, populate_existing=True)
    if registration is None:
        # purged between lookup and update
        raise RegistrationNotFound()
    if result.rowcount != 1:
        return ScanResult(registration, already_scanned=True)

    logger.info("Registration %s scanned by %s", registration.id, scanner_id)
    return ScanResult(registration, already_scanned=False)
