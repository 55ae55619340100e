"""Registration store.

A registration is created in three steps: a seat is reserved on the event
counter, a signed pass is issued, and the row is inserted. The reservation and
the insert share one transaction. The insert is guarded by the
``unique_student_event`` constraint; when it fails, or anything else goes
wrong after the reservation, the rollback returns the seat.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from event_pass.errors import EventPassError, NotFound
from event_pass.models import Event, Registration, User
from event_pass.models.user import ADMIN
from event_pass.services import capacity
from event_pass.services.auth import Principal
from event_pass.services.capacity import ReserveResult
from event_pass.services.events import EventNotFound
from event_pass.services.notifier import Notifier
from event_pass.services.tokens import TokenCodec
from event_pass.services.users import get_user, list_by_role

logger = logging.getLogger(__name__)


class EventFull(EventPassError):
    message = "Event is full"


class EventClosed(EventPassError):
    message = "Event is not open for registration"


class StudentNotFound(NotFound):
    message = "Student not found"


class AlreadyRegistered(EventPassError):
    message = "Already registered for this event"


async def find_registration(session: AsyncSession, student_id: int, event_id: int) -> Optional[Registration]:
    result = await session.execute(
        select(Registration).where(
            Registration.student_id == student_id,  # type: ignore[arg-type]
            Registration.event_id == event_id,  # type: ignore[arg-type]
        )
    )
    return result.scalars().first()


async def register(
    session: AsyncSession,
    codec: TokenCodec,
    notifier: Notifier,
    student: Principal,
    event_id: int,
) -> Registration:
    student_row = await get_user(session, student.id)
    if student_row is None:
        raise StudentNotFound()
    event = await session.get(Event, event_id)
    if event is None:
        raise EventNotFound()
    if await find_registration(session, student.id, event_id):
        raise AlreadyRegistered()

    # Status and capacity are re-checked atomically here, the read above may be stale.
    # The seat stays uncommitted until the row is inserted, so a concurrent attempt
    # by the same student waits on the write lock and then sees the row.
    outcome = await capacity.try_reserve(session, event_id, commit=False)
    if outcome is ReserveResult.NOT_FOUND:
        raise EventNotFound()
    if outcome is ReserveResult.CLOSED:
        raise EventClosed()
    if outcome is ReserveResult.FULL:
        if await find_registration(session, student.id, event_id):
            raise AlreadyRegistered()
        raise EventFull()

    registration = Registration(
        student_id=student.id,
        event_id=event_id,
        token=codec.issue(student.id, event_id),
    )
    session.add(registration)
    try:
        await session.commit()
    except IntegrityError:
        # the rollback also gives the seat back
        await session.rollback()
        if await find_registration(session, student.id, event_id):
            raise AlreadyRegistered()
        raise
    except Exception:
        await session.rollback()
        raise

    logger.info("Student %s registered for event %s", student.id, event_id)

    for admin in await list_by_role(session, ADMIN):
        notifier.emit(
            admin.id,
            f"{student_row.name} registered for {event.title}",
            "event_update",
            event_id,
        )
    return registration


async def list_by_student(session: AsyncSession, student_id: int) -> List[Tuple[Registration, Event]]:
    result = await session.execute(
        select(Registration, Event)
        .join(Event, Event.id == Registration.event_id)  # type: ignore[arg-type]
        .where(Registration.student_id == student_id)  # type: ignore[arg-type]
        .order_by(desc(Registration.created_at), desc(Registration.id))  # type: ignore[arg-type]
    )
    return [(registration, event) for registration, event in result.all()]


async def list_by_event(session: AsyncSession, event_id: int) -> List[Tuple[Registration, Optional[User]]]:
    result = await session.execute(
        select(Registration, User)
        .outerjoin(User, User.id == Registration.student_id)  # type: ignore[arg-type]
        .where(Registration.event_id == event_id)  # type: ignore[arg-type]
        .order_by(desc(Registration.created_at), desc(Registration.id))  # type: ignore[arg-type]
    )
    return [(registration, student) for registration, student in result.all()]
