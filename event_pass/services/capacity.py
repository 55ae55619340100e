"""Registration ceiling per event.

The counter lives on the ``event`` row and is only moved by single conditional
UPDATE statements, so the check and the increment happen under one write lock.
"""

import enum
import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from event_pass.models import Event, EventStatus

logger = logging.getLogger(__name__)


class ReserveResult(enum.Enum):
    RESERVED = "reserved"
    FULL = "full"
    CLOSED = "closed"  # event no longer upcoming
    NOT_FOUND = "not_found"


async def try_reserve(session: AsyncSession, event_id: int, commit: bool = True) -> ReserveResult:
    """Take one seat if the event is upcoming and not full.

    With ``commit=False`` a successful increment is left in the session's
    transaction, which keeps the write lock until the caller commits or rolls
    back. A failed attempt always ends its transaction before classifying.
    """
    result = await session.execute(
        update(Event)
        .where(
            Event.id == event_id,  # type: ignore[arg-type]
            Event.status == EventStatus.UPCOMING,  # type: ignore[arg-type]
            Event.current_registrations < Event.capacity,  # type: ignore[arg-type]
        )
        .values(current_registrations=Event.current_registrations + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 1:
        if commit:
            await session.commit()
        return ReserveResult.RESERVED
    await session.commit()

    event = await session.get(Event, event_id, populate_existing=True)
    if event is None:
        return ReserveResult.NOT_FOUND
    if event.status != EventStatus.UPCOMING:
        return ReserveResult.CLOSED
    return ReserveResult.FULL


async def release(session: AsyncSession, event_id: int) -> bool:
    """Give back one seat; never drops the counter below zero."""
    result = await session.execute(
        update(Event)
        .where(
            Event.id == event_id,  # type: ignore[arg-type]
            Event.current_registrations > 0,  # type: ignore[arg-type]
        )
        .values(current_registrations=Event.current_registrations - 1)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    released = result.rowcount == 1
    if not released:
        logger.warning("release on event %s found nothing to release", event_id)
    return released
